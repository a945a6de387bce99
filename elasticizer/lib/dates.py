from datetime import datetime, timezone
from typing import Optional, Union

Instant = Union[datetime, int, float]


def _as_utc(instant: Optional[Instant]) -> datetime:
    if instant is None:
        return datetime.now(timezone.utc)
    if isinstance(instant, (int, float)):
        return datetime.fromtimestamp(instant, tz=timezone.utc)
    # naive datetimes are taken to already be UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def calendar_stamp(instant: Optional[Instant] = None) -> str:
    """UTC day of `instant` (default: now) as YYYY.MM.DD, for day-based indexing."""
    return _as_utc(instant).strftime("%Y.%m.%d")


def timestamp(instant: Optional[Instant] = None) -> str:
    """
    Full ISO-8601 UTC timestamp with millisecond precision and a Z suffix,
    e.g. 2024-03-05T07:08:09.123Z. Sorts lexically in time order.
    """
    iso = _as_utc(instant).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")
