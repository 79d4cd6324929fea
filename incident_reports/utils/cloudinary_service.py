import io
import logging
import re
import cloudinary.uploader

from incident_reports.config import ConfigError, Settings
from incident_reports.utils.errors import DeleteError, UploadError

logger = logging.getLogger(__name__)

EXTENSION_RE = re.compile(r"\.[^/.]+$")


def storage_key_from_url(url) -> str:
    """
    Turn a delivery URL back into the public id Cloudinary deletes by.

    ``https://host/demo/image/upload/v123/reports/abc123.jpg`` -> ``reports/abc123``

    Everything after ``upload/<version>/`` is kept and the trailing extension
    dropped. Returns an empty string when there is no ``upload`` segment.
    """
    if not url or not isinstance(url, str):
        return ""

    parts = url.split("/")
    try:
        start = parts.index("upload") + 2  # skip the version segment
    except ValueError:
        return ""

    return EXTENSION_RE.sub("", "/".join(parts[start:]))


class CloudinaryStorage:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "reports"):
        self.folder = folder
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryStorage":
        if not all([settings.cloud_name, settings.cloud_api_key, settings.cloud_api_secret]):
            raise ConfigError("Set CLOUD_NAME, CLOUD_API_KEY and CLOUD_API_SECRET")

        return cls(
            settings.cloud_name,
            settings.cloud_api_key,
            settings.cloud_api_secret,
            folder=settings.cloudinary_folder,
        )

    def upload(self, data: bytes, filename: str | None = None) -> str:
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=self.folder,
                resource_type="image",
                secure=True,
                **self._credentials,
            )
        except Exception as e:
            raise UploadError() from e

        url = result.get("secure_url")
        if not url:
            raise UploadError()

        logger.info("Uploaded %s to %s", filename or "image", url)
        return url

    def delete(self, key: str) -> bool:
        # nothing derivable from the url, so there is nothing to delete
        if not key:
            logger.warning("Empty storage key, skipping Cloudinary delete")
            return False

        try:
            result = cloudinary.uploader.destroy(key, **self._credentials)
        except Exception as e:
            raise DeleteError() from e

        if result.get("result") != "ok":
            logger.warning("Cloudinary delete of %s returned %s", key, result.get("result"))
            return False

        logger.info("Deleted %s from Cloudinary", key)
        return True
