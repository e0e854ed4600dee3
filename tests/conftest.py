import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import ensure_indexes
from errors import UploadError
from main import AppContext, app, get_context


class FakeUploader:
    """Stands in for Cloudinary: records what was sent and hands back fake URLs."""

    def __init__(self):
        self.configured = True
        self.uploaded = []
        self.fail_at = None

    def upload(self, path, folder):
        if self.fail_at is not None and len(self.uploaded) == self.fail_at:
            raise UploadError()
        with open(path, "rb") as f:
            content = f.read()
        self.uploaded.append((folder, content))
        return f"https://res.cloudinary.com/demo/image/upload/{folder}/{len(self.uploaded)}.jpg"


@pytest.fixture
def settings(tmp_path):
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    return Settings(static_dir=str(static_dir), upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def db():
    database = mongomock.MongoClient()["renteasy_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def client(settings, db, uploader):
    ctx = AppContext(settings=settings, db=db, uploader=uploader)
    app.dependency_overrides[get_context] = lambda: ctx
    yield TestClient(app)
    app.dependency_overrides.clear()
