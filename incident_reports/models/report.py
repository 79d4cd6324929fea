from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    image_url: str = Field(alias="imageUrl")
    latitude: float
    longitude: float
    description: str = ""
    timestamp: Optional[datetime] = None  # set by Firestore on write


class CreateReportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    image_url: str = Field(alias="imageUrl")


class DeleteReportResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    error: str
