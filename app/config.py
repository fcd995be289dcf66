"""Runtime configuration for the SCORM Reader API.

All settings come from environment variables with development-friendly
defaults, so the service starts without any extra setup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3007
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    max_upload_size: int = 100 * 1024 * 1024  # 100MB
    package_max_age_seconds: int = 60 * 60
    cleanup_interval_seconds: int = 60 * 60
    cleanup_enabled: bool = True

    @property
    def max_upload_size_mb(self) -> int:
        return self.max_upload_size // (1024 * 1024)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment"""
        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            version=os.getenv("APP_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3007")),
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            max_upload_size=int(os.getenv("MAX_UPLOAD_SIZE_MB", "100")) * 1024 * 1024,
            package_max_age_seconds=int(os.getenv("PACKAGE_MAX_AGE_SECONDS", "3600")),
            cleanup_interval_seconds=int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600")),
            cleanup_enabled=_env_bool("CLEANUP_ENABLED", "true"),
        )


settings = Settings.from_env()
