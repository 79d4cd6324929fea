from typing import Optional
from fastapi import UploadFile
from pydantic import BaseModel

from incident_reports.utils.errors import ValidationError


class ValidatedCreateReport(BaseModel):
    image: bytes
    filename: Optional[str] = None
    latitude: float
    longitude: float
    description: str = ""


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


async def validate_create_report_form(
    image: Optional[UploadFile],
    latitude: Optional[str],
    longitude: Optional[str],
    description: Optional[str],
) -> ValidatedCreateReport:
    raw_bytes = await image.read() if image is not None else b""
    if not raw_bytes:
        raise ValidationError("Image required")

    if _is_blank(latitude) or _is_blank(longitude):
        raise ValidationError("Location required")

    try:
        parsed_latitude = float(latitude)
        parsed_longitude = float(longitude)
    except ValueError:
        raise ValidationError("Invalid location")

    return ValidatedCreateReport(
        image=raw_bytes,
        filename=image.filename,
        latitude=parsed_latitude,
        longitude=parsed_longitude,
        description=(description or "").strip(),
    )
