"""HLS delivery settings embedded in channels and plan tiers."""

from pydantic import BaseModel, ConfigDict, Field


class QualityProfile(BaseModel):
    """One rendition of the transcoding ladder."""

    name: str
    resolution: str
    bitrate: int  # kbps
    fps: int = 30
    enabled: bool = True


class GeoLocking(BaseModel):
    enabled: bool = False
    allowed_countries: list[str] = Field(default_factory=list)
    blocked_countries: list[str] = Field(default_factory=list)


class IpRestrictions(BaseModel):
    enabled: bool = False
    allowed_ips: list[str] = Field(default_factory=list)  # IPs or CIDR blocks
    blocked_ips: list[str] = Field(default_factory=list)


class HlsSettings(BaseModel):
    """HLS configuration: a tenant's draft, a sanitized snapshot, or a plan's entitlements."""

    model_config = ConfigDict(extra="ignore")

    quality_profiles: list[QualityProfile] = Field(default_factory=list)
    vtt_enabled: bool = False
    segment_length: int = 6  # seconds
    dvr_duration: int = 30  # minutes
    geo_locking: GeoLocking = Field(default_factory=GeoLocking)
    ip_restrictions: IpRestrictions = Field(default_factory=IpRestrictions)
    catchup_tv_enabled: bool = False
    catchup_duration: int = 0  # hours
