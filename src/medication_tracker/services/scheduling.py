"""Reminder schedule construction from frequency and meal times."""

from collections.abc import Sequence
from datetime import time

from medication_tracker.domain.errors import ScheduleValidationError
from medication_tracker.domain.profiles import MealTimeProfile
from medication_tracker.domain.time_of_day import (
    format_time_of_day,
    normalize_time_of_day,
)

SYNTHETIC_START_HOUR = 8
SYNTHETIC_SPACING_HOURS = 4


def validate_frequency(value: object) -> int:
    """Return the frequency as a positive integer or raise."""
    if isinstance(value, bool):
        raise ScheduleValidationError(f"Invalid frequency: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ScheduleValidationError(f"Invalid frequency: {value!r}")
    if value <= 0:
        raise ScheduleValidationError(f"Frequency must be positive, got {value}")
    return value


def build_reminder_schedule(
    frequency: int,
    profile: MealTimeProfile,
    explicit_selection: Sequence[object] | None = None,
) -> list[str]:
    """Return exactly ``frequency`` reminder times in ``HH:MM:SS`` form.

    An explicit selection with exactly ``frequency`` entries is kept in the
    order given. Otherwise the profile's slots are used in profile order and
    any shortfall is padded with times every four hours from 08:00.
    Duplicate times are kept.
    """
    frequency = validate_frequency(frequency)
    if explicit_selection is not None and len(explicit_selection) == frequency:
        return [normalize_time_of_day(value) for value in explicit_selection]

    times = profile.times[:frequency]
    missing = frequency - len(times)
    times.extend(synthetic_time(index) for index in range(missing))
    return times


def synthetic_time(index: int) -> str:
    """Return the ``index``-th padding time: 08:00, 12:00, 16:00, ..."""
    hour = (SYNTHETIC_START_HOUR + SYNTHETIC_SPACING_HOURS * index) % 24
    return format_time_of_day(time(hour=hour))
