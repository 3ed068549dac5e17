"""
Display Formatter Service
Formatting used by clients when rendering water sources.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..core.config import settings
from ..models.database_models import WaterSource

AVAILABLE_STATUS = "Available"


def is_available(status: str) -> bool:
    """Only an exact "Available" counts; anything else is shown as unavailable."""
    return status == AVAILABLE_STATUS


def status_badge(status: str) -> str:
    return "positive" if is_available(status) else "negative"


def format_last_updated(last_updated: int, tz_offset: Optional[int] = None) -> str:
    """
    Format epoch milliseconds like "Feb 16, 2026 9:30 AM".

    Args:
        last_updated: Epoch milliseconds, 0 when unknown
        tz_offset: Hours from UTC, defaults to settings.TZ_OFFSET

    Returns:
        Formatted local time, or "Unknown" for 0 or an unrepresentable value
    """
    if last_updated == 0:
        return "Unknown"

    offset = settings.TZ_OFFSET if tz_offset is None else tz_offset
    try:
        moment = datetime.fromtimestamp(last_updated / 1000, tz=timezone(timedelta(hours=offset)))
    except (OverflowError, ValueError, OSError):
        return "Unknown"
    hour = moment.hour % 12 or 12
    return f"{moment:%b %d, %Y} {hour}:{moment:%M} {'AM' if moment.hour < 12 else 'PM'}"


def summary_line(source: WaterSource) -> str:
    return f"{source.type} • {source.status}"


def to_display_dict(source: WaterSource) -> Dict[str, Any]:
    data = source.model_dump()
    data['is_available'] = is_available(source.status)
    data['status_badge'] = status_badge(source.status)
    data['last_updated_display'] = format_last_updated(source.last_updated)
    data['summary'] = summary_line(source)
    return data
