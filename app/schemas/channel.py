"""Channel ODM schema."""

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import Field, field_validator

from .channel_state import ChannelState
from .hls_settings import HlsSettings
from .schema_utils import parse_mongo_datetime


class Channel(Document):
    """Channel document model."""

    channel_id: Indexed(str, unique=True)  # type: ignore[valid-type]
    tenant_id: Indexed(str)  # type: ignore[valid-type]

    # Channel descriptor fields
    name: str
    description: str | None = None

    status: ChannelState = ChannelState.CREATING

    # Compute instance
    instance_id: str | None = None
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None

    # Derived endpoints
    hls_url: str | None = None
    rtmp_url: str | None = None
    transcoding_url: str | None = None
    health_check_url: str | None = None
    status_server_url: str | None = None

    # Sanitized snapshot taken at creation time
    hls_settings: HlsSettings = Field(default_factory=HlsSettings)

    # True when the instance is a synthetic placeholder, never billed capacity
    is_mock: bool = False
    provision_message: str | None = None

    # Last transcoding probe
    transcoding_status: str | None = None
    transcoding_checked_at: datetime | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", "transcoding_checked_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        """Parse MongoDB Extended JSON datetime format."""
        return parse_mongo_datetime(v)

    class Settings:
        name = "channel"
        indexes = [
            "status",
        ]
