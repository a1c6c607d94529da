from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from alnet.core.config import settings

logger = logging.getLogger("alnet")

# Endpoints that are reachable without a bearer token
PUBLIC_PATHS = (
    f"{settings.API_PREFIX}/auth/register",
    f"{settings.API_PREFIX}/auth/login",
    f"{settings.API_PREFIX}/auth/token",
    f"{settings.API_PREFIX}/auth/refresh-token",
    f"{settings.API_PREFIX}/media/",
)

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        is_api = path.startswith(settings.API_PREFIX)
        if is_api and not request.headers.get("Authorization") and not path.startswith(PUBLIC_PATHS):
            logger.warning(f"Protected endpoint {path} accessed without auth header")

        response = await call_next(request)

        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
