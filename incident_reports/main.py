import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from incident_reports.config import Settings, get_settings
from incident_reports.routers import reports
from incident_reports.utils.cloudinary_service import CloudinaryStorage
from incident_reports.utils.errors import ReportError, report_error_handler, unhandled_error_handler
from incident_reports.utils.firestore_service import FirestoreReports

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[CloudinaryStorage] = None,
    reports_store: Optional[FirestoreReports] = None,
) -> FastAPI:
    """
    Build the FastAPI app. Clients passed in are used as-is; missing ones are
    built from settings on startup and released on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        owned = None

        if getattr(app.state, "storage", None) is None:
            app.state.storage = CloudinaryStorage.from_settings(settings)

        if getattr(app.state, "reports", None) is None:
            owned = FirestoreReports.from_settings(settings)
            app.state.reports = owned

        logger.info("Backend running on port %s", settings.port)
        yield

        if owned is not None:
            owned.close()

    app = FastAPI(title="Incident Reports", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.reports = reports_store

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ReportError, report_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Register routers
    app.include_router(reports.router, tags=["Reports"])

    # NGO viewer
    if os.path.isdir(settings.viewer_dir):
        app.mount("/viewer", StaticFiles(directory=settings.viewer_dir, html=True), name="viewer")
    else:
        logger.warning("Viewer directory %s not found, /viewer is disabled", settings.viewer_dir)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Backend running with Cloudinary + Firestore"

    return app


def run():
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
