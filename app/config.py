# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic import PositiveInt
from pydantic_settings import BaseSettings
from typing import Optional

from app.errors import ConfigurationError


class Settings(BaseSettings):
    # ── Network ───────────────────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    SHUTDOWN_GRACE_SECONDS: int = 10
    CORS_ORIGINS: list[str] = ["*"]

    # ── Google Cloud ──────────────────────────────────────────────────────
    GOOGLE_CLOUD_PROJECT: Optional[str] = None   # Falls back to the metadata server

    # ── Storage ───────────────────────────────────────────────────────────
    STORAGE_BACKEND: str = "memory"              # memory | database
    DATABASE_URL: Optional[str] = None           # Explicit SQLAlchemy URL wins over DB_*
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_PORT: int = 3306
    INSTANCE_CONNECTION_NAME: Optional[str] = None   # project:region:instance
    PRIVATE_IP: Optional[str] = None             # Connect over TCP instead of the unix socket
    MEMORY_HISTORY_LIMIT: Optional[PositiveInt] = None   # None keeps every reading

    # ── Upstream (Urban Climb) ────────────────────────────────────────────
    OCCUPANCY_URL: str = "https://portal.urbanclimb.com.au/uc-services/ajax/gym/occupancy.ashx?branch="
    ATTENDANCE_URL: str = "https://api-prod.urbanclimb.com.au/widgets/trendline-data?branch="
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    INGESTION_DEADLINE_SECONDS: float = 30.0
    ATTENDANCE_SLOT_COUNT: int = 16

    # ── Ingestion behaviour ───────────────────────────────────────────────
    ATTENDANCE_REFRESH_SCOPE: str = "branch"     # branch | all
    TIMESTAMP_OFFSET_HOURS: float = 0.0          # Brisbane deployment used 10
    LEGACY_GET_TRIGGERS: bool = True             # Keep GET aliases for the /store endpoints

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"                     # text | json
    LOG_TO_FILE: bool = True

    @property
    def uses_database(self) -> bool:
        return self.STORAGE_BACKEND.lower() == "database"

    def database_url(self) -> str:
        """
        Resolve the SQLAlchemy URL for the database backend.
        Raises ConfigurationError when a required DB_* variable is missing.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        required = {
            "DB_USER": self.DB_USER,
            "DB_PASS": self.DB_PASS,
            "DB_NAME": self.DB_NAME,
            "INSTANCE_CONNECTION_NAME": self.INSTANCE_CONNECTION_NAME,
        }
        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} environment variable(s) not set for the database backend"
            )

        if self.PRIVATE_IP:
            return (f"mysql+pymysql://{self.DB_USER}:{self.DB_PASS}"
                    f"@{self.PRIVATE_IP}:{self.DB_PORT}/{self.DB_NAME}")
        return (f"mysql+pymysql://{self.DB_USER}:{self.DB_PASS}@/{self.DB_NAME}"
                f"?unix_socket=/cloudsql/{self.INSTANCE_CONNECTION_NAME}")

    def validate_startup(self):
        """Fail fast on settings the process cannot run with."""
        if self.STORAGE_BACKEND.lower() not in ("memory", "database"):
            raise ConfigurationError(f"Unknown STORAGE_BACKEND '{self.STORAGE_BACKEND}'")
        if self.ATTENDANCE_REFRESH_SCOPE.lower() not in ("branch", "all"):
            raise ConfigurationError(
                f"Unknown ATTENDANCE_REFRESH_SCOPE '{self.ATTENDANCE_REFRESH_SCOPE}'"
            )
        if self.uses_database:
            self.database_url()

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
