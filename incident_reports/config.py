from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_VIEWER_DIR = str(Path(__file__).resolve().parent.parent / "viewer")


class ConfigError(Exception):
    pass


class Settings(BaseSettings):
    """Environment-backed settings, read from the process env and a local .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Cloudinary
    cloud_name: Optional[str] = None
    cloud_api_key: Optional[str] = None
    cloud_api_secret: Optional[str] = None
    cloudinary_folder: str = "reports"

    # Firestore
    firebase_config: Optional[str] = None  # service account JSON string
    firebase_credentials: Optional[str] = None  # path to service account file
    firestore_collection: str = "reports"

    # comma-separated in the environment
    cors_origins: Annotated[list[str], NoDecode] = ["*"]
    viewer_dir: str = DEFAULT_VIEWER_DIR

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings loaded once at startup."""
    return Settings()
