from fastapi import APIRouter, Depends
from starlette.responses import Response

from alnet.core.storage import r2_storage
from alnet.modules.media.service import MediaService

router = APIRouter()

def get_media_service() -> MediaService:
    return MediaService(r2_storage)

@router.get("/{path:path}")
def serve_media(path: str, media_service: MediaService = Depends(get_media_service)) -> Response:
    """Serve an uploaded file; profile photo URLs point here"""
    return media_service.get_media(path)
