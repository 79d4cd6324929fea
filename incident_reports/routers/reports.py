import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from incident_reports.dependencies import get_reports_store, get_storage
from incident_reports.models.report import CreateReportResponse, DeleteReportResponse, ErrorResponse, Report
from incident_reports.utils.cloudinary_service import CloudinaryStorage, storage_key_from_url
from incident_reports.utils.errors import DeleteError, FetchError, NotFoundError, ReportError
from incident_reports.utils.firestore_service import FirestoreReports
from incident_reports.utils.form_validator import validate_create_report_form

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/report",
    response_model=CreateReportResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_report(
    image: Optional[UploadFile] = File(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    storage: CloudinaryStorage = Depends(get_storage),
    reports: FirestoreReports = Depends(get_reports_store),
):
    form = await validate_create_report_form(image, latitude, longitude, description)

    # upload first, metadata only after a successful upload
    image_url = await run_in_threadpool(storage.upload, form.image, form.filename)

    try:
        report_id = await run_in_threadpool(
            reports.add, image_url, form.latitude, form.longitude, form.description
        )
    except Exception as e:
        raise ReportError() from e

    logger.info("Created report %s", report_id)
    return CreateReportResponse(imageUrl=image_url)


@router.get(
    "/reports",
    response_model=list[Report],
    responses={500: {"model": ErrorResponse}},
)
async def list_reports(reports: FirestoreReports = Depends(get_reports_store)):
    try:
        return await run_in_threadpool(reports.list_all)
    except Exception as e:
        raise FetchError() from e


@router.delete(
    "/report/{report_id}",
    response_model=DeleteReportResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_report(
    report_id: str,
    storage: CloudinaryStorage = Depends(get_storage),
    reports: FirestoreReports = Depends(get_reports_store),
):
    try:
        report = await run_in_threadpool(reports.get, report_id)
    except Exception as e:
        raise DeleteError() from e

    if report is None:
        raise NotFoundError()

    # blob first, then the record; no compensation if the second step fails
    key = storage_key_from_url(report.get("imageUrl"))
    await run_in_threadpool(storage.delete, key)

    try:
        await run_in_threadpool(reports.delete, report_id)
    except Exception as e:
        raise DeleteError() from e

    logger.info("Deleted report %s", report_id)
    return DeleteReportResponse(message="Report deleted")
