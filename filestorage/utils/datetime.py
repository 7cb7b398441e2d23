"""Datetime utilities for expiry handling and timestamps."""
from datetime import datetime, timezone

# Expiry as a datetime or as epoch milliseconds
ExpiresAt = datetime | int | float


def ensure_aware(dt: datetime | None) -> datetime | None:
    """
    Convert naive datetime to aware UTC datetime.

    Naive datetimes passed as expiry are assumed to be UTC.

    Examples:
        >>> naive_dt = datetime(2025, 1, 1, 12, 0)
        >>> ensure_aware(naive_dt).tzinfo
        datetime.timezone.utc
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def normalize_expiry_to_datetime(expires_at: ExpiresAt) -> datetime:
    if isinstance(expires_at, datetime):
        return ensure_aware(expires_at)
    return datetime.fromtimestamp(expires_at / 1000, tz=timezone.utc)


def normalize_expiry_to_milliseconds(expires_at: ExpiresAt) -> int:
    if isinstance(expires_at, datetime):
        return int(ensure_aware(expires_at).timestamp() * 1000)
    return int(expires_at)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
