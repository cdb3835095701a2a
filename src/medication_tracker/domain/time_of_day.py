"""Time-of-day helpers for reminder times."""

from datetime import time

from medication_tracker.domain.errors import ScheduleValidationError


def parse_time_of_day(value: object) -> time:
    """Parse ``H:MM``, ``HH:MM`` or ``HH:MM:SS`` into a time without seconds."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise ScheduleValidationError(f"Invalid time of day: {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in {2, 3} or not all(part.isdigit() for part in parts):
        raise ScheduleValidationError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    try:
        return time(hour=hour, minute=minute)
    except ValueError as exc:
        raise ScheduleValidationError(f"Invalid time of day: {value!r}") from exc


def format_time_of_day(value: time) -> str:
    """Format a time as ``HH:MM:SS`` with seconds always ``00``."""
    return f"{value.hour:02d}:{value.minute:02d}:00"


def normalize_time_of_day(value: object) -> str:
    """Return the canonical ``HH:MM:SS`` form of a time of day."""
    return format_time_of_day(parse_time_of_day(value))
