import pytest

import media
from config import Settings
from errors import UploadError


def test_upload_returns_secure_url(monkeypatch):
    calls = []

    def fake_upload(path, **options):
        calls.append((path, options))
        return {"secure_url": "https://res.cloudinary.com/cloud/image/upload/x.jpg"}

    monkeypatch.setattr(media.cloudinary.uploader, "upload", fake_upload)
    uploader = media.CloudinaryUploader(Settings(cloudinary_url="cloudinary://1:s@cloud"))
    assert uploader.configured
    assert uploader.upload("/tmp/x", "renteasy") == "https://res.cloudinary.com/cloud/image/upload/x.jpg"
    assert calls[0][1]["folder"] == "renteasy"


def test_sdk_failure_becomes_upload_error(monkeypatch):
    def broken(path, **options):
        raise RuntimeError("network down")

    monkeypatch.setattr(media.cloudinary.uploader, "upload", broken)
    uploader = media.CloudinaryUploader(Settings(cloudinary_url="cloudinary://1:s@cloud"))
    with pytest.raises(UploadError):
        uploader.upload("/tmp/x", "renteasy")


def test_missing_secure_url_is_an_error(monkeypatch):
    monkeypatch.setattr(media.cloudinary.uploader, "upload", lambda path, **options: {})
    uploader = media.CloudinaryUploader(Settings(cloudinary_url="cloudinary://1:s@cloud"))
    with pytest.raises(UploadError):
        uploader.upload("/tmp/x", "renteasy")


def test_unconfigured_uploader_refuses():
    uploader = media.CloudinaryUploader(Settings())
    assert not uploader.configured
    with pytest.raises(UploadError) as exc:
        uploader.upload("/tmp/x", "renteasy")
    assert exc.value.status_code == 500
