import sys
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    DATABASE_URL: str = Field(..., description="SQLAlchemy URL of the automation database")
    CREATE_SCHEMA: bool = Field(False, description="Create missing tables at startup")

    # Jobs
    JOB_TYPE: str = Field("ONR_SIGRI_CONSULTA", description="automation_jobs.type claimed by this worker")
    POLL_INTERVAL_SECONDS: float = Field(5.0, gt=0)
    FAILURE_BACKOFF_SECONDS: float = Field(5.0, gt=0)

    # Filesystem: artifacts are written under DATA_DIR and exposed under BACKEND_UPLOADS_BASE
    DATA_DIR: str = Field("/data")
    BACKEND_UPLOADS_BASE: str = Field("/app/app/uploads")

    # Browser
    BROWSER_HEADLESS: bool = Field(True)
    BROWSER_TIMEOUT_MS: int = Field(60_000, gt=0)
    DOWNLOAD_TIMEOUT_MS: int = Field(60_000, gt=0)
    ONR_PFX_PATH: Optional[str] = Field(None)
    ONR_PFX_PASSWORD: Optional[str] = Field(None)

    # Logging configuration
    LOG_LEVEL: str = Field("INFO")
    LOG_FILE_PATH: Optional[str] = Field(None)
    LOG_JSON: bool = Field(True)

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @field_validator("ONR_PFX_PATH", "ONR_PFX_PASSWORD", "LOG_FILE_PATH", mode="before")
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process, exiting when the environment is unusable."""
    try:
        return Settings()
    except ValidationError as e:
        print("Missing/invalid environment variables:", file=sys.stderr)
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", []))
            print(f" - {loc}: {err.get('msg', '')}", file=sys.stderr)
        sys.exit(1)
