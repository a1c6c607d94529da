import os
import uuid
import boto3
import logging
import traceback
from pathlib import Path
from typing import Optional

from fastapi import HTTPException
from .config import settings

logger = logging.getLogger(__name__)

class R2Storage:
    """Handles file storage using Cloudflare R2, with a local disk fallback"""

    def __init__(self):
        """Initialize the R2 client with settings from config"""
        self.client = None
        self.bucket = settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL.rstrip("/")
        self.base_url = settings.BASE_URL.rstrip("/")
        self.media_url = f"{self.base_url}{settings.API_PREFIX}/media/"

        # Enable R2 client initialization if all required settings are present
        if all([settings.R2_ENDPOINT, settings.R2_ACCESS_KEY_ID, settings.R2_SECRET_ACCESS_KEY]):
            try:
                logger.info(f"Creating S3 client for R2 bucket '{self.bucket}'")
                self.client = boto3.client(
                    's3',
                    endpoint_url=settings.R2_ENDPOINT,
                    aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY
                )
                logger.info("R2Storage S3 client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to create S3 client: {str(e)}")
                logger.error(traceback.format_exc())
                logger.warning("R2 storage will not be available due to initialization failure")
        else:
            missing = []
            if not settings.R2_ENDPOINT:
                missing.append("R2_ENDPOINT")
            if not settings.R2_ACCESS_KEY_ID:
                missing.append("R2_ACCESS_KEY_ID")
            if not settings.R2_SECRET_ACCESS_KEY:
                missing.append("R2_SECRET_ACCESS_KEY")
            logger.warning(f"R2 storage not configured, using local uploads - missing: {', '.join(missing)}")

    @property
    def backend(self) -> str:
        return "r2" if self.client else "local"

    @staticmethod
    def local_root() -> Path:
        return Path(settings.UPLOAD_DIRECTORY)

    def upload_bytes(
        self,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        prefix: str = "profile_photos",
    ) -> str:
        """Store a file and return the URL it can be fetched from"""
        file_extension = os.path.splitext(filename or "")[1].lower()
        key = f"{prefix}/{uuid.uuid4().hex}{file_extension}"

        if not self.client:
            local_path = self.local_root() / key
            try:
                local_path.parent.mkdir(parents=True, exist_ok=True)
                local_path.write_bytes(content)
            except OSError as e:
                logger.error(f"[UPLOAD] Failed to save file locally: {str(e)}")
                raise HTTPException(status_code=500, detail="Failed to save file")
            logger.info(f"[UPLOAD] Saved file locally at {local_path}")
            # Served back by the media router's local fallback
            return f"{self.media_url}{key}"

        logger.info(f"[UPLOAD] Uploading '{filename}' to R2 bucket '{self.bucket}' with key '{key}'")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or 'application/octet-stream'
            )
        except Exception as e:
            logger.error(f"[UPLOAD] Failed to upload to R2: {str(e)}")
            logger.error(traceback.format_exc())
            raise HTTPException(status_code=500, detail="Failed to upload media")

        # If R2 public URL is configured, prefer that for direct access
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"{self.media_url}{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        if self.public_url and url.startswith(f"{self.public_url}/"):
            return url[len(self.public_url) + 1:]
        if url.startswith(self.media_url):
            return url[len(self.media_url):]
        return None

    def delete_file(self, url: str) -> bool:
        """Delete a stored file using its URL"""
        if not url:
            logger.error("No URL provided for file deletion")
            return False

        key = self.key_from_url(url)
        if key is None:
            logger.error(f"URL {url} doesn't match any expected URL pattern")
            return False

        if not self.client:
            local_path = self.local_root() / key
            if local_path.is_file():
                local_path.unlink()
                logger.info(f"Deleted local file {local_path}")
                return True
            logger.warning(f"Local file {local_path} not found for deletion")
            return False

        try:
            logger.info(f"Deleting file with key '{key}' from bucket '{self.bucket}'")
            self.client.delete_object(Bucket=self.bucket, Key=key)
            return True
        except Exception as e:
            logger.error(f"Failed to delete from R2: {str(e)}")
            logger.error(traceback.format_exc())
            return False

# Global instance for app-wide usage
r2_storage = R2Storage()
