from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "postgresql://localhost/jobly"


@dataclass
class DbConfig:
    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_pre_ping: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.database_url:
            raise ValueError("database_url must be a non-empty SQLAlchemy URL")

    @classmethod
    def from_env(cls) -> "DbConfig":
        """
        Build a config from JOBLY_DATABASE_URL and JOBLY_DB_ECHO.

        JOBLY_DB_ECHO accepts "1", "true" or "yes" (case-insensitive).
        """
        echo = os.environ.get("JOBLY_DB_ECHO", "").strip().lower() in ("1", "true", "yes")
        return cls(
            database_url=os.environ.get("JOBLY_DATABASE_URL", DEFAULT_DATABASE_URL),
            echo=echo,
        )
