from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_serializer, field_validator

from app.schemas import ChannelState, HlsSettings
from app.services.integrations.transcoding_probe import TranscodingStatus
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


def serialize_utc_datetime(dt: datetime | None) -> str | None:
    """ISO 8601 with an explicit UTC offset; naive datetimes are assumed UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


class CreateChannelIn(BaseModel):
    name: str = Field(description="Display name of the channel")
    description: str | None = Field(default=None, description="Description of the channel")
    hls_settings: HlsSettings | None = Field(
        default=None,
        description="Requested HLS configuration; features outside the plan are switched off",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg="Name is required",
                status_code=HttpStatusCode.BAD_REQUEST,
            )
        return v


class ChannelIdIn(BaseModel):
    channel_id: str = Field(description="Unique identifier of the channel")


class SetMaintenanceIn(ChannelIdIn):
    enabled: bool = Field(description="True to enter maintenance, False to return to active")


class ProvisionOut(BaseModel):
    channel_id: str
    status: ChannelState
    instance_id: str | None = None
    instance_type: str | None = None
    public_ip: str | None = None
    private_ip: str | None = None
    hls_url: str | None = None
    rtmp_url: str | None = None
    transcoding_url: str | None = None
    health_check_url: str | None = None
    status_server_url: str | None = None
    hls_settings: HlsSettings
    is_mock: bool = Field(description="True when the channel is backed by a placeholder, not real capacity")
    message: str


class ChannelOut(BaseModel):
    channel_id: str
    tenant_id: str
    name: str
    description: str | None = None
    status: ChannelState
    instance_id: str | None = None
    instance_type: str | None = None
    public_ip: str | None = None
    hls_url: str | None = None
    rtmp_url: str | None = None
    transcoding_url: str | None = None
    health_check_url: str | None = None
    status_server_url: str | None = None
    hls_settings: HlsSettings
    is_mock: bool
    provision_message: str | None = None
    transcoding_status: str | None = None
    transcoding_checked_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at", "transcoding_checked_at")
    @classmethod
    def serialize_datetime(cls, v: datetime | None) -> str | None:
        return serialize_utc_datetime(v)


class ListChannelsOut(BaseModel):
    channels: list[ChannelOut]


class DeleteChannelOut(BaseModel):
    channel_id: str
    success: bool
    instance_terminated: bool = Field(description="True when termination of a real instance was requested")
    message: str
    termination_error: str | None = Field(
        default=None,
        description="Set when the termination request failed; the instance may still be running",
    )


class TranscodingStatusOut(BaseModel):
    channel_id: str
    public_ip: str | None = None
    status: TranscodingStatus
    is_mock: bool
    details: dict | None = None
    error: str | None = None
    checked_at: datetime

    @field_serializer("checked_at")
    @classmethod
    def serialize_datetime(cls, v: datetime) -> str | None:
        return serialize_utc_datetime(v)


class IngestEventIn(ChannelIdIn):
    pass
