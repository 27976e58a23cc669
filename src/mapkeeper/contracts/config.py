"""Configuration contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///mapkeeper.db"


class MapKeeperConfig(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    delete_after_days: int = Field(default=30, ge=1)
    sweep_interval_seconds: float = Field(default=86400.0, gt=0)
    store_timeout_seconds: float = Field(default=30.0, gt=0)
    echo_sql: bool = False

    model_config = {"frozen": True}

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        value = value.strip()
        if "://" not in value:
            raise ValueError("database_url must be a SQLAlchemy URL, e.g. sqlite+aiosqlite:///maps.db")
        return value
