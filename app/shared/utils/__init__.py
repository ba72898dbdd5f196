"""
Utility helpers for shared packages.
"""

from .timeutil import utc_now

__all__ = [
    "utc_now",
]
