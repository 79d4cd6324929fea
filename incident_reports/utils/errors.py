import logging
from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ReportError(Exception):
    """Base error for report operations, rendered as ``{"error": message}``."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReportError):
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ReportError):
    status_code = 404
    default_message = "Report not found"


class UploadError(ReportError):
    default_message = "Cloudinary upload failed"


class DeleteError(ReportError):
    default_message = "Delete failed"


class FetchError(ReportError):
    default_message = "Fetch failed"


async def report_error_handler(request: Request, exc: ReportError):
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)

    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)

    return JSONResponse(status_code=500, content={"error": ReportError.default_message})
