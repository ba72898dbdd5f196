"""
Subscription plans and the entitlements they grant.
"""

from .entitlements import Feature, check_channel_quota, has_feature_access, sanitize_hls_settings
from .plans import PLAN_CATALOG, PlanKey, PlanTier, get_plan, require_plan

__all__ = [
    "PLAN_CATALOG",
    "Feature",
    "PlanKey",
    "PlanTier",
    "check_channel_quota",
    "get_plan",
    "has_feature_access",
    "require_plan",
    "sanitize_hls_settings",
]
