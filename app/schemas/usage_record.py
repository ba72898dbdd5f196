"""Usage record ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import Field, field_validator

from .schema_utils import parse_mongo_datetime


class UsageRecord(Document):
    """Per-channel viewing metrics, written by external telemetry collectors."""

    channel_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    tenant_id: str

    viewer_count: int = 0
    peak_viewers: int = 0
    total_views: int = 0
    uptime: int = 0  # seconds

    geo_distribution: dict[str, Any] = Field(default_factory=dict)
    device_distribution: dict[str, Any] = Field(default_factory=dict)
    quality_distribution: dict[str, Any] = Field(default_factory=dict)

    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    class Settings:
        name = "usage_record"
