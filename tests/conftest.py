import uuid
from datetime import datetime, timedelta, timezone
import pytest
from fastapi.testclient import TestClient

from incident_reports.config import Settings
from incident_reports.main import create_app
from incident_reports.utils.errors import DeleteError, UploadError

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.deleted_keys = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, data: bytes, filename: str | None = None) -> str:
        if self.fail_upload:
            raise UploadError()

        self.uploads.append(data)
        n = len(self.uploads)
        return f"https://res.cloudinary.com/demo/image/upload/v{1700000000 + n}/reports/img{n}.jpg"

    def delete(self, key: str) -> bool:
        if self.fail_delete:
            raise DeleteError()

        self.deleted_keys.append(key)
        return bool(key)


class FakeReports:
    def __init__(self):
        self.docs = {}
        self.fail_add = False
        self.fail_list = False
        self.fail_get = False
        self.fail_delete = False
        self._ticks = 0

    def _next_timestamp(self):
        self._ticks += 1
        return BASE_TIME + timedelta(seconds=self._ticks)

    def insert(self, doc: dict) -> str:
        report_id = uuid.uuid4().hex
        self.docs[report_id] = {"description": "", **doc}
        return report_id

    def add(self, image_url, latitude, longitude, description=""):
        if self.fail_add:
            raise RuntimeError("firestore unavailable")

        return self.insert(
            {
                "imageUrl": image_url,
                "latitude": latitude,
                "longitude": longitude,
                "description": description,
                "timestamp": self._next_timestamp(),
            }
        )

    def list_all(self):
        if self.fail_list:
            raise RuntimeError("firestore unavailable")

        ordered = sorted(self.docs.items(), key=lambda item: item[1]["timestamp"], reverse=True)
        return [{"id": report_id, **doc} for report_id, doc in ordered]

    def get(self, report_id):
        if self.fail_get:
            raise RuntimeError("firestore unavailable")

        doc = self.docs.get(report_id)
        return None if doc is None else {"id": report_id, **doc}

    def delete(self, report_id):
        if self.fail_delete:
            raise RuntimeError("firestore unavailable")

        self.docs.pop(report_id, None)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def reports_store():
    return FakeReports()


@pytest.fixture
def client(storage, reports_store):
    app = create_app(settings=Settings(_env_file=None), storage=storage, reports_store=reports_store)
    return TestClient(app)


@pytest.fixture
def server_error_client(storage, reports_store):
    # unhandled errors are re-raised by the test client unless told otherwise
    app = create_app(settings=Settings(_env_file=None), storage=storage, reports_store=reports_store)
    return TestClient(app, raise_server_exceptions=False)


SETTINGS_ENV = (
    "HOST", "PORT", "LOG_LEVEL", "CLOUD_NAME", "CLOUD_API_KEY", "CLOUD_API_SECRET",
    "CLOUDINARY_FOLDER", "FIREBASE_CONFIG", "FIREBASE_CREDENTIALS",
    "FIRESTORE_COLLECTION", "CORS_ORIGINS", "VIEWER_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
