"""Channel domain models."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.domain.billing.plans import PlanTier, get_plan
from app.schemas import ChannelState, HlsSettings
from app.services.integrations.transcoding_probe import TranscodingStatus


class TenantContext(BaseModel):
    """Identity facts of the caller, passed explicitly into every operation."""

    tenant_id: str
    plan_key: str | None = None
    is_admin: bool = False

    @property
    def plan(self) -> PlanTier | None:
        return get_plan(self.plan_key)


class ChannelCreateParams(BaseModel):
    """Parameters for creating a channel.

    When hls_settings is omitted the plan's default settings are requested.
    """

    name: str
    description: str | None = None
    hls_settings: HlsSettings | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()


class ChannelDraft(BaseModel):
    """Fields the store needs to insert a new channel record."""

    tenant_id: str
    name: str
    description: str | None = None
    hls_settings: HlsSettings


class UsageSeed(BaseModel):
    tenant_id: str
    viewer_count: int = 0
    peak_viewers: int = 0
    total_views: int = 0
    uptime: int = 0


class ChannelResponse(BaseModel):
    """Channel response model."""

    channel_id: str
    tenant_id: str
    name: str
    description: str | None = None
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
    is_mock: bool
    provision_message: str | None = None
    transcoding_status: str | None = None
    transcoding_checked_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProvisionResult(BaseModel):
    """Outcome of provisioning; is_mock tells real capacity from a placeholder."""

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
    hls_settings: HlsSettings = Field(default_factory=HlsSettings)
    is_mock: bool
    message: str


class DecommissionResult(BaseModel):
    channel_id: str
    success: bool = True
    instance_terminated: bool
    message: str
    termination_error: str | None = None


class TranscodingCheckResult(BaseModel):
    channel_id: str
    public_ip: str | None = None
    status: TranscodingStatus
    is_mock: bool
    details: dict | None = None
    error: str | None = None
    checked_at: datetime


class FeatureAccessResult(BaseModel):
    feature: str
    has_access: bool
    current_plan: str | None = None
    required_plan: str | None = None
    plan_name: str | None = None
    plan_price: int | None = None
    plan_channels: int | None = None
    plan_features: list[str] = Field(default_factory=list)
