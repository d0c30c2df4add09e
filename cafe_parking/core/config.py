import logging
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cafe_parking.models.schemas import MAX_SEARCH_RADIUS as PLACES_MAX_RADIUS

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Google Places
    PLACES_API_KEY: str = ""
    PLACES_BASE_URL: str = "https://maps.googleapis.com/maps/api/place"
    PLACES_LANGUAGE: str = "ja"
    PLACES_KEYWORD: str = "cafe parking"

    # Search radius in meters
    DEFAULT_SEARCH_RADIUS: int = Field(default=1000, gt=0, le=PLACES_MAX_RADIUS)
    MAX_SEARCH_RADIUS: int = Field(default=PLACES_MAX_RADIUS, gt=0, le=PLACES_MAX_RADIUS)

    # JSON parking catalogue; the bundled one is used when unset
    PARKING_TAGS_PATH: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    # Comma separated in the environment
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000", "http://127.0.0.1:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("PLACES_API_KEY", mode="before")
    @classmethod
    def strip_key(cls, v):
        return (v or "").strip()

    @field_validator("PLACES_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("PARKING_TAGS_PATH", mode="before")
    @classmethod
    def blank_path_is_unset(cls, v):
        return v or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @model_validator(mode="after")
    def default_within_max(self) -> "Settings":
        if self.DEFAULT_SEARCH_RADIUS > self.MAX_SEARCH_RADIUS:
            raise ValueError("DEFAULT_SEARCH_RADIUS must not exceed MAX_SEARCH_RADIUS")
        return self


settings = Settings()

if not settings.PLACES_API_KEY:
    logger.warning("PLACES_API_KEY not found in environment variables")
