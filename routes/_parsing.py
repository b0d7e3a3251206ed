from datetime import date, datetime, time

from services.errors import ValidationError


def parse_date(value, field: str, required: bool = True) -> date:
    # Expect ISO format like "2026-01-20"
    if value in (None, ""):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD")


def parse_time(value, field: str) -> time:
    # "09:00" or "09:00:00"
    if value in (None, ""):
        raise ValidationError(f"{field} is required")
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(str(value), fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid {field}. Use HH:MM")


def parse_int(value, field: str, required: bool = True) -> int:
    if value in (None, ""):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
