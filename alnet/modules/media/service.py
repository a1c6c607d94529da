import logging
import mimetypes
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException
from starlette.responses import FileResponse, Response, StreamingResponse

from alnet.core.storage import R2Storage

logger = logging.getLogger(__name__)

CACHE_HEADERS = {"Cache-Control": "public, max-age=86400"}

class MediaService:
    def __init__(self, r2_storage: R2Storage):
        self.r2_storage = r2_storage

    def _local_path(self, path: str) -> Path:
        root = self.r2_storage.local_root().resolve()
        file_path = (root / path).resolve()
        # Keys never leave the upload directory
        if root != file_path and root not in file_path.parents:
            logger.warning(f"Rejected media path outside upload directory: {path}")
            raise HTTPException(status_code=404, detail="File not found")
        return file_path

    def get_media(self, path: str) -> Response:
        """Get media from R2 storage with local storage fallback"""
        if self.r2_storage.client:
            try:
                logger.info(f"Attempting to retrieve file {path} from R2")
                obj = self.r2_storage.client.get_object(Bucket=self.r2_storage.bucket, Key=path)
                return StreamingResponse(
                    obj["Body"].iter_chunks(),
                    media_type=obj.get("ContentType") or "application/octet-stream",
                    headers=CACHE_HEADERS,
                )
            except (BotoCoreError, ClientError) as e:
                logger.warning(f"Failed to retrieve file {path} from R2: {str(e)}. Falling back to local storage.")

        file_path = self._local_path(path)
        if not file_path.is_file():
            logger.error(f"File {path} not found in local storage")
            raise HTTPException(status_code=404, detail="File not found")

        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return FileResponse(
            file_path,
            media_type=content_type,
            headers={**CACHE_HEADERS, "Content-Disposition": f"inline; filename={file_path.name}"},
        )
