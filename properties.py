"""
Property upload helpers: coordinate parsing, numeric form fields and the
sequential photo upload loop.
"""

import logging
import math
import os
import re
import shutil
import uuid
from typing import List, Optional

from fastapi import UploadFile

from errors import UploadError, ValidationError
from media import CloudinaryUploader

logger = logging.getLogger(__name__)

MAX_PHOTOS = 5
PHOTO_FIELD = "photos"
HOUSE = "house"

_COORDINATES = re.compile(r"Lat:\s*([\d.-]+),\s*Lng:\s*([\d.-]+)")


def map_link(location: Optional[str]) -> str:
    """Google Maps link for a location containing ``Lat: <n>, Lng: <n>``, else ""."""
    if not location:
        return ""
    match = _COORDINATES.search(location)
    if not match:
        return ""
    lat, lng = match.groups()
    return f"https://www.google.com/maps?q={lat},{lng}"


def parse_number(field: str, value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError:
        raise ValidationError(f"Invalid number for {field}")
    if not math.isfinite(number):
        raise ValidationError(f"Invalid number for {field}")
    return number


def _spool_to_disk(photo: UploadFile, upload_dir: str) -> str:
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, uuid.uuid4().hex)
    with open(path, "wb") as f:
        shutil.copyfileobj(photo.file, f)
    return path


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def upload_photos(photos: List[UploadFile], uploader: CloudinaryUploader,
                  upload_dir: str, folder: str) -> List[str]:
    """Upload photos one at a time, in submission order.

    The first failure aborts the request; photos already on Cloudinary stay there.
    """
    urls = []
    for photo in photos:
        try:
            path = _spool_to_disk(photo, upload_dir)
        except OSError as e:
            logger.exception("Could not write temporary file for %s", photo.filename)
            raise UploadError() from e
        try:
            logger.debug("Uploading %s (%d of %d)", photo.filename, len(urls) + 1, len(photos))
            urls.append(uploader.upload(path, folder))
        finally:
            _remove(path)
    return urls
