# core/utils.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from core.config import REPORT_DEFAULT_DAYS, REPORT_MAX_RANGE_DAYS
from core.errors import ValidationError


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how rows are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def day_key(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def parse_datetime(value: str, field: str = "date") -> datetime:
    """
    Parse a YYYY-MM-DD date or an ISO-8601 timestamp.
    Aware timestamps are converted to naive UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = (value or "").strip()
        if not text:
            raise ValidationError(f"{field} is required")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date_range(start: Optional[str], end: Optional[str], required: bool = True,
                     max_days: int = REPORT_MAX_RANGE_DAYS) -> Optional[Tuple[datetime, datetime]]:
    """
    Build an inclusive [start, end] window; end always runs through the end of its day.

    Returns None when both bounds are missing and the range is optional.
    """
    if not start and not end:
        if required:
            raise ValidationError("start and end dates are required")
        return None
    if not start or not end:
        raise ValidationError("Both start and end dates must be given")

    start_at = parse_datetime(start, "start")
    end_at = end_of_day(parse_datetime(end, "end"))

    if start_at > end_at:
        raise ValidationError("start must not be after end")
    if max_days and end_at - start_at > timedelta(days=max_days):
        raise ValidationError(f"Date range may not exceed {max_days} days")
    return start_at, end_at


def default_date_range(days: int = REPORT_DEFAULT_DAYS) -> Tuple[datetime, datetime]:
    """Last `days` days, ending today."""
    now = utcnow()
    return now - timedelta(days=days), end_of_day(now)
