"""
Cloudinary image uploads
"""

import logging

import cloudinary
import cloudinary.uploader

from config import Settings
from errors import UploadError

logger = logging.getLogger(__name__)


class CloudinaryUploader:
    def __init__(self, settings: Settings):
        credentials = settings.cloudinary_credentials
        self.configured = credentials is not None
        if credentials is None:
            if settings.cloudinary_url:
                logger.warning("CLOUDINARY_URL is malformed, image uploads are disabled")
            else:
                logger.warning("CLOUDINARY_URL is not set, image uploads are disabled")
            return
        cloud_name, api_key, api_secret = credentials
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)
        logger.info("Cloudinary configured for cloud %s", cloud_name)

    def upload(self, path: str, folder: str) -> str:
        """Upload a local file and return its durable https URL."""
        if not self.configured:
            logger.error("Upload of %s refused, Cloudinary is not configured", path)
            raise UploadError()
        try:
            result = cloudinary.uploader.upload(path, folder=folder, resource_type="image")
        except Exception as e:
            logger.exception("Cloudinary upload failed for %s", path)
            raise UploadError() from e
        url = result.get("secure_url")
        if not url:
            logger.error("Cloudinary response had no secure_url: %s", result)
            raise UploadError()
        return url
