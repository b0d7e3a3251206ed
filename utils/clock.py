from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def local_now() -> datetime:
    """Naive wall-clock time in the configured booking timezone."""
    tz_name = current_app.config.get("BOOKING_TIMEZONE") or "UTC"
    tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)
    return datetime.now(tz).replace(tzinfo=None)


def local_today():
    return local_now().date()
