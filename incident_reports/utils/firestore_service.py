import json
import logging
from typing import Optional
import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from incident_reports.config import ConfigError, Settings

logger = logging.getLogger(__name__)

APP_NAME = "incident-reports"


def load_credentials(settings: Settings):
    """
    Pick the Firebase credentials: FIREBASE_CONFIG (JSON string) first, then
    the FIREBASE_CREDENTIALS file, then Application Default Credentials.
    """
    if settings.firebase_config:
        try:
            return credentials.Certificate(json.loads(settings.firebase_config))
        except json.JSONDecodeError as e:
            raise ConfigError("FIREBASE_CONFIG is not valid JSON") from e

    if settings.firebase_credentials:
        logger.info("Loading Firebase credentials from %s", settings.firebase_credentials)
        return credentials.Certificate(settings.firebase_credentials)

    return credentials.ApplicationDefault()


class FirestoreReports:
    def __init__(self, client, collection: str = "reports", app: Optional[firebase_admin.App] = None):
        self._client = client
        self._collection = collection
        self._app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreReports":
        app = firebase_admin.initialize_app(load_credentials(settings), name=APP_NAME)
        return cls(firestore.client(app), settings.firestore_collection, app=app)

    @property
    def collection(self):
        return self._client.collection(self._collection)

    def add(self, image_url: str, latitude: float, longitude: float, description: str = "") -> str:
        _, doc_ref = self.collection.add(
            {
                "imageUrl": image_url,
                "latitude": latitude,
                "longitude": longitude,
                "description": description,
                "timestamp": SERVER_TIMESTAMP,
            }
        )
        return doc_ref.id

    def list_all(self) -> list[dict]:
        query = self.collection.order_by("timestamp", direction=firestore.Query.DESCENDING)
        return [{"id": doc.id, **doc.to_dict()} for doc in query.stream()]

    def get(self, report_id: str) -> Optional[dict]:
        doc = self.collection.document(report_id).get()
        if not doc.exists:
            return None

        return {"id": doc.id, **doc.to_dict()}

    def delete(self, report_id: str) -> None:
        self.collection.document(report_id).delete()

    def close(self) -> None:
        if self._app is not None:
            firebase_admin.delete_app(self._app)
            self._app = None
