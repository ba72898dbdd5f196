"""Subscription plan catalog.

The catalog is the single source of truth for channel quotas and HLS feature
entitlements. It is built once at import time and never mutated.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from app.schemas.hls_settings import GeoLocking, HlsSettings, IpRestrictions, QualityProfile
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

FOUR_K_PROFILE = "4K"


class PlanKey(str, Enum):
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | PlanKey | None") -> "PlanKey | None":
        """Normalize a raw plan key; returns None for unknown or empty keys."""
        if isinstance(value, PlanKey):
            return value
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class PlanTier(BaseModel):
    """Immutable description of a subscription tier."""

    model_config = ConfigDict(frozen=True)

    key: PlanKey
    name: str
    price: int  # USD per month
    channels: int  # channel quota
    features: tuple[str, ...]
    quality_profiles: tuple[QualityProfile, ...]
    hls_settings: HlsSettings

    @property
    def allows_4k(self) -> bool:
        return any(profile.name == FOUR_K_PROFILE for profile in self.quality_profiles)

    def default_hls_settings(self) -> HlsSettings:
        """A fresh draft pre-filled with everything this plan offers."""
        settings = self.hls_settings.model_copy(deep=True)
        settings.quality_profiles = [profile.model_copy() for profile in self.quality_profiles]
        return settings


_P4K = QualityProfile(name="4K", resolution="3840x2160", bitrate=8000, fps=30)
_P1080 = QualityProfile(name="1080p", resolution="1920x1080", bitrate=4000, fps=30)
_P720 = QualityProfile(name="720p", resolution="1280x720", bitrate=2000, fps=30)
_P480 = QualityProfile(name="480p", resolution="854x480", bitrate=1000, fps=30)

PLAN_CATALOG: dict[PlanKey, PlanTier] = {
    PlanKey.BASIC: PlanTier(
        key=PlanKey.BASIC,
        name="Basic",
        price=29,
        channels=1,
        features=("1 Channel", "HD Streaming", "Basic Analytics", "30min DVR"),
        quality_profiles=(_P720, _P480),
        hls_settings=HlsSettings(
            vtt_enabled=False,
            segment_length=6,
            dvr_duration=30,
            geo_locking=GeoLocking(enabled=False),
            ip_restrictions=IpRestrictions(enabled=False),
            catchup_tv_enabled=False,
            catchup_duration=0,
        ),
    ),
    PlanKey.PRO: PlanTier(
        key=PlanKey.PRO,
        name="Pro",
        price=99,
        channels=3,
        features=("3 Channels", "HD Streaming", "DVR Recording", "Advanced Analytics", "Geo-locking"),
        quality_profiles=(_P1080, _P720, _P480),
        hls_settings=HlsSettings(
            vtt_enabled=True,
            segment_length=6,
            dvr_duration=120,
            geo_locking=GeoLocking(enabled=True),
            ip_restrictions=IpRestrictions(enabled=True),
            catchup_tv_enabled=True,
            catchup_duration=24,
        ),
    ),
    PlanKey.ENTERPRISE: PlanTier(
        key=PlanKey.ENTERPRISE,
        name="Enterprise",
        price=299,
        channels=10,
        features=(
            "10 Channels",
            "4K Streaming",
            "DVR Recording",
            "Geo-locking",
            "Priority Support",
            "Catch-up TV",
        ),
        quality_profiles=(_P4K, _P1080, _P720, _P480),
        hls_settings=HlsSettings(
            vtt_enabled=True,
            segment_length=4,
            dvr_duration=240,
            geo_locking=GeoLocking(enabled=True),
            ip_restrictions=IpRestrictions(enabled=True),
            catchup_tv_enabled=True,
            catchup_duration=168,
        ),
    ),
}


def get_plan(plan_key: "str | PlanKey | None") -> PlanTier | None:
    """Look up a plan tier. Unknown keys return None; callers must handle it."""
    key = PlanKey.parse(plan_key)
    if key is None:
        return None
    return PLAN_CATALOG[key]


def require_plan(plan_key: "str | PlanKey | None") -> PlanTier:
    plan = get_plan(plan_key)
    if plan is None:
        raise AppError(
            errcode=AppErrorCode.E_PLAN_NOT_FOUND,
            errmesg=f"Unknown plan: {plan_key}",
            status_code=HttpStatusCode.NOT_FOUND,
        )
    return plan


def list_plans() -> list[PlanTier]:
    return list(PLAN_CATALOG.values())
