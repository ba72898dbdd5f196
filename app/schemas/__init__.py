"""Beanie ODM schemas for MongoDB collections."""

from .channel import Channel
from .channel_state import ChannelState
from .hls_settings import GeoLocking, HlsSettings, IpRestrictions, QualityProfile
from .init import init_beanie_odm
from .usage_record import UsageRecord

__all__ = [
    "Channel",
    "ChannelState",
    "GeoLocking",
    "HlsSettings",
    "IpRestrictions",
    "QualityProfile",
    "UsageRecord",
    "init_beanie_odm",
]
