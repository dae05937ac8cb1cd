from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    default_platform: str = Field(default="gba", alias="DEFAULT_PLATFORM")
    max_upload_bytes: int = Field(default=1024, alias="MAX_UPLOAD_BYTES")

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
