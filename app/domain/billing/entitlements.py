"""Plan-based entitlement checks for channel configurations."""

from enum import Enum

from loguru import logger

from app.schemas.hls_settings import GeoLocking, HlsSettings, IpRestrictions
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .plans import FOUR_K_PROFILE, PlanTier


class Feature(str, Enum):
    GEO_LOCKING = "geo_locking"
    IP_RESTRICTIONS = "ip_restrictions"
    CATCHUP_TV = "catchup_tv"
    VTT = "vtt"
    FOUR_K = "4k"
    MULTIPLE_CHANNELS = "multiple_channels"


def has_feature_access(plan: PlanTier | None, feature: Feature | str) -> bool:
    """Whether the plan grants a feature. Unrecognized feature names are allowed."""
    try:
        feature = Feature(feature)
    except ValueError:
        return True

    if plan is None:
        return False

    entitled = plan.hls_settings
    match feature:
        case Feature.GEO_LOCKING:
            return entitled.geo_locking.enabled
        case Feature.IP_RESTRICTIONS:
            return entitled.ip_restrictions.enabled
        case Feature.CATCHUP_TV:
            return entitled.catchup_tv_enabled
        case Feature.VTT:
            return entitled.vtt_enabled
        case Feature.FOUR_K:
            return plan.allows_4k
        case Feature.MULTIPLE_CHANNELS:
            return plan.channels > 1


def sanitize_hls_settings(plan: PlanTier | None, draft: HlsSettings) -> HlsSettings:
    """Strip every feature the plan does not grant from a requested configuration.

    Toggles are ANDed with the plan's entitlement; allow/block lists survive
    only while their toggle does. Only the 4K profile is gated by plan; other
    profiles and the numeric durations pass through as requested. An unknown
    plan (None) grants nothing. Pure and idempotent; never raises.
    """
    geo_enabled = draft.geo_locking.enabled and has_feature_access(plan, Feature.GEO_LOCKING)
    ip_enabled = draft.ip_restrictions.enabled and has_feature_access(plan, Feature.IP_RESTRICTIONS)
    allows_4k = has_feature_access(plan, Feature.FOUR_K)

    return HlsSettings(
        quality_profiles=[
            profile.model_copy()
            for profile in draft.quality_profiles
            if profile.name != FOUR_K_PROFILE or allows_4k
        ],
        vtt_enabled=draft.vtt_enabled and has_feature_access(plan, Feature.VTT),
        segment_length=draft.segment_length,
        dvr_duration=draft.dvr_duration,
        geo_locking=GeoLocking(
            enabled=geo_enabled,
            allowed_countries=list(draft.geo_locking.allowed_countries) if geo_enabled else [],
            blocked_countries=list(draft.geo_locking.blocked_countries) if geo_enabled else [],
        ),
        ip_restrictions=IpRestrictions(
            enabled=ip_enabled,
            allowed_ips=list(draft.ip_restrictions.allowed_ips) if ip_enabled else [],
            blocked_ips=list(draft.ip_restrictions.blocked_ips) if ip_enabled else [],
        ),
        catchup_tv_enabled=draft.catchup_tv_enabled and has_feature_access(plan, Feature.CATCHUP_TV),
        catchup_duration=draft.catchup_duration,
    )


def channel_quota(plan: PlanTier | None) -> int:
    return plan.channels if plan is not None else 0


def check_channel_quota(plan: PlanTier | None, existing_count: int) -> None:
    """Reject a channel creation once the tenant holds as many channels as the plan allows."""
    quota = channel_quota(plan)
    if existing_count >= quota:
        logger.info(
            f"Channel quota reached: plan={plan.key if plan else None} "
            f"existing={existing_count} quota={quota}"
        )
        raise AppError(
            errcode=AppErrorCode.E_QUOTA_EXCEEDED,
            errmesg=f"Channel limit reached. Your plan allows {quota} channel(s).",
            status_code=HttpStatusCode.FORBIDDEN,
        )
