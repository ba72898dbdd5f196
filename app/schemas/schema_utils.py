"""Shared utilities for schema validation."""

from datetime import datetime, timezone
from typing import Any


def parse_mongo_datetime(v: Any) -> Any:
    """Accept MongoDB Extended JSON dates as well as plain datetimes.

    Handles the relaxed form {'$date': '2024-11-01T08:00:00Z'} and the
    canonical form {'$date': {'$numberLong': '1730448000000'}}, which show up
    in documents restored with mongoimport.
    """
    if isinstance(v, datetime):
        return v
    if not isinstance(v, dict) or "$date" not in v:
        return v

    raw = v["$date"]
    if isinstance(raw, dict) and "$numberLong" in raw:
        return datetime.fromtimestamp(int(raw["$numberLong"]) / 1000, tz=timezone.utc)
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
    return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
