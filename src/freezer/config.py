"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/freezer.db"),
        description="SQLite database location.",
    )
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL overriding the SQLite path (e.g. a MySQL server).",
    )
    app_env: str = Field(default="dev", description="Deployment environment label.")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    expiring_days: int = Field(
        default=14,
        ge=0,
        description="Items whose best-before date falls within this many days count as expiring.",
    )
    default_best_before_days: int = Field(
        default=90,
        ge=1,
        description="Shelf life applied at intake when neither payload nor recipe provide one.",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or f"sqlite:///{self.database_path}"


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip().strip('"').strip("'")
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("FREEZER_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (db_url := _env("FREEZER_DATABASE_URL")):
        payload["database_url"] = db_url
    if (app_env := _env("FREEZER_APP_ENV") or _env("APP_ENV")):
        payload["app_env"] = app_env
    if (log_level := _env("FREEZER_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("FREEZER_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("FREEZER_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (expiring_days := _env("FREEZER_EXPIRING_DAYS")):
        try:
            payload["expiring_days"] = int(expiring_days)
        except ValueError:
            pass
    if (best_before_days := _env("FREEZER_DEFAULT_BEST_BEFORE_DAYS")):
        try:
            payload["default_best_before_days"] = int(best_before_days)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
