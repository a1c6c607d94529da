from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from pathlib import Path

from alnet.core.config import settings
from alnet.core.errors import register_exception_handlers
from alnet.core.storage import r2_storage
from alnet.db.init_db import create_all_tables
from alnet.middleware.request_logging import RequestLoggingMiddleware
from alnet.middleware.auth_logging import AuthLoggingMiddleware
from alnet.modules.auth.api.router import router as auth_router
from alnet.modules.user_management.api.router import router as user_router
from alnet.modules.profiles.api.router import router as profiles_router
from alnet.modules.connections.api.router import router as connections_router
from alnet.modules.messages.api.router import router as messages_router
from alnet.modules.notifications.api.router import router as notifications_router
from alnet.modules.jobs.api.router import router as jobs_router
from alnet.modules.startups.api.router import router as startups_router
from alnet.modules.donations.api.router import router as donations_router
from alnet.modules.analytics.api.router import router as analytics_router
from alnet.modules.events.api.router import router as events_router
from alnet.modules.audit.api.router import router as audit_router
from alnet.modules.announcements.api.router import router as announcements_router
from alnet.modules.media.router import router as media_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("alnet")

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    debug=settings.DEBUG,
    description="Alumni networking platform for students, alumni and administrators",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

register_exception_handlers(app)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    logger.info(f"BASE_URL: {settings.BASE_URL}")
    logger.info(f"Media storage backend: {r2_storage.backend}")

    if r2_storage.backend == "local":
        Path(settings.UPLOAD_DIRECTORY, "profile_photos").mkdir(parents=True, exist_ok=True)

    create_all_tables()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["authentication"])
app.include_router(user_router, prefix=f"{settings.API_PREFIX}/users", tags=["users"])
app.include_router(profiles_router, prefix=f"{settings.API_PREFIX}/profiles", tags=["profiles"])
app.include_router(connections_router, prefix=f"{settings.API_PREFIX}/connections", tags=["connections"])
app.include_router(messages_router, prefix=f"{settings.API_PREFIX}/messages", tags=["messages"])
app.include_router(notifications_router, prefix=f"{settings.API_PREFIX}/notifications", tags=["notifications"])
app.include_router(jobs_router, prefix=f"{settings.API_PREFIX}/jobs", tags=["jobs"])
app.include_router(startups_router, prefix=f"{settings.API_PREFIX}/startups", tags=["startups"])
app.include_router(donations_router, prefix=f"{settings.API_PREFIX}/donations", tags=["donations"])
app.include_router(analytics_router, prefix=f"{settings.API_PREFIX}/analytics", tags=["analytics"])
app.include_router(events_router, prefix=f"{settings.API_PREFIX}/events", tags=["events"])
app.include_router(audit_router, prefix=f"{settings.API_PREFIX}/audit", tags=["audit"])
app.include_router(announcements_router, prefix=f"{settings.API_PREFIX}/announcements", tags=["announcements"])
app.include_router(media_router, prefix=f"{settings.API_PREFIX}/media", tags=["media"])

@app.get("/")
async def root():
    return {
        "message": "Welcome to AlNet",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("alnet.main:app", host="0.0.0.0", port=8000, reload=True)
