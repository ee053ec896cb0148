from datetime import datetime, timezone
from typing import Optional, Union


def truncate_content(content: str, max_length: int = 500) -> str:
    """Truncate long content for better error readability"""
    if len(content) <= max_length:
        return content
    return content[:max_length] + f"... [truncated, total {len(content)} characters]"


def excerpt(content: Optional[str], max_length: int = 200) -> str:
    """Hard-capped body excerpt for diagnostics"""
    return (content or "")[:max_length]


def from_timestamp(value: Union[int, float, str, None]) -> datetime:
    """
    Convert a unix timestamp in seconds or milliseconds to an aware UTC datetime.

    Values above 9999999999 are treated as milliseconds. Missing or broken
    values fall back to the current time.
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        return utc_now()

    if value > 9999999999:
        value /= 1000

    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return utc_now()


def parse_datetime(date_str: Optional[str], fmt: Optional[str] = None) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or ``fmt`` when given) into an aware UTC datetime.

    Naive results are assumed to be UTC. Returns None when parsing fails.
    """
    if not date_str:
        return None

    try:
        if fmt:
            dt = datetime.strptime(date_str.strip(), fmt)
        else:
            dt = datetime.fromisoformat(date_str.strip().replace('Z', '+00:00'))
    except ValueError:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
