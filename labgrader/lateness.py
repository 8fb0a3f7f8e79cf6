"""
Deadline handling and the lateness verdict.
"""

from datetime import datetime


def parse_deadline(value: str | datetime) -> datetime:
    """
    Parse a deadline that carries an explicit UTC offset.

    Args:
        value: ISO-8601 string such as "2025-11-03T23:59:00+03:00", or a datetime.

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If the value is not ISO-8601 or has no UTC offset.
    """
    if isinstance(value, datetime):
        moment = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError(f"Deadline must include a UTC offset: {value}")
    return moment


def to_epoch_ms(moment: datetime) -> int:
    """Epoch milliseconds of an aware datetime."""
    return int(round(moment.timestamp() * 1000))


def is_late(resolved_epoch_ms: int | None, deadline_epoch_ms: int) -> bool:
    """
    Compare the resolved submission time with the deadline.

    A submission exactly at the deadline is on time. An unknown submission
    time is never late.
    """
    if resolved_epoch_ms is None:
        return False
    return resolved_epoch_ms > deadline_epoch_ms
