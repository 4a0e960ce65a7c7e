"""Shared utility helpers used across services."""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return timezone-aware UTC now. Replaces deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)


def clamp_limit(raw, default: int, maximum: int) -> int:
    """Parse a ?limit= query param, falling back to default on junk input."""
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        value = default
    return max(1, min(value, maximum))
