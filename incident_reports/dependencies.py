from fastapi import Request

from incident_reports.utils.cloudinary_service import CloudinaryStorage
from incident_reports.utils.firestore_service import FirestoreReports


def get_storage(request: Request) -> CloudinaryStorage:
    return request.app.state.storage


def get_reports_store(request: Request) -> FirestoreReports:
    return request.app.state.reports
