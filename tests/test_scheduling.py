"""Tests for reminder schedule construction."""

import pytest

from medication_tracker.domain.errors import ScheduleValidationError
from medication_tracker.domain.profiles import MealSlot, MealTimeProfile
from medication_tracker.services.scheduling import (
    build_reminder_schedule,
    synthetic_time,
    validate_frequency,
)
from tests.conftest import DEFAULT_MEAL_TIMES

PROFILE = MealTimeProfile.from_mapping(DEFAULT_MEAL_TIMES)


def test_takes_first_slots_in_profile_order() -> None:
    assert build_reminder_schedule(2, PROFILE) == ["08:00:00", "13:00:00"]


@pytest.mark.parametrize("frequency", range(1, 7))
def test_returns_exactly_frequency_normalized_times(frequency: int) -> None:
    times = build_reminder_schedule(frequency, PROFILE)

    assert len(times) == frequency
    assert all(len(value) == 8 and value.endswith(":00") for value in times)


def test_pads_missing_slots_with_synthetic_times() -> None:
    times = build_reminder_schedule(5, PROFILE)

    assert times == ["08:00:00", "13:00:00", "19:00:00", "08:00:00", "12:00:00"]


def test_empty_profile_is_fully_synthetic() -> None:
    times = build_reminder_schedule(4, MealTimeProfile())

    assert times == ["08:00:00", "12:00:00", "16:00:00", "20:00:00"]


def test_synthetic_times_wrap_past_midnight() -> None:
    assert synthetic_time(4) == "00:00:00"
    assert synthetic_time(5) == "04:00:00"


def test_explicit_selection_keeps_user_order() -> None:
    times = build_reminder_schedule(2, PROFILE, ["19:00", "08:00"])

    assert times == ["19:00:00", "08:00:00"]


def test_explicit_selection_with_wrong_length_falls_back_to_profile() -> None:
    times = build_reminder_schedule(2, PROFILE, ["19:00"])

    assert times == ["08:00:00", "13:00:00"]


def test_duplicate_profile_times_are_kept() -> None:
    profile = MealTimeProfile(
        slots=(MealSlot("breakfast", "08:00:00"), MealSlot("pills", "08:00:00"))
    )

    assert build_reminder_schedule(2, profile) == ["08:00:00", "08:00:00"]


def test_custom_slots_follow_canonical_slots() -> None:
    profile = MealTimeProfile.from_mapping(
        {"snack": "16:00", "dinner": "19:00", "breakfast": "7:30"}
    )

    assert build_reminder_schedule(3, profile) == [
        "07:30:00",
        "19:00:00",
        "16:00:00",
    ]


@pytest.mark.parametrize("value", [0, -1, 1.5, True, "abc", None])
def test_validate_frequency_rejects_invalid_values(value: object) -> None:
    with pytest.raises(ScheduleValidationError):
        validate_frequency(value)


def test_validate_frequency_accepts_integer_like_values() -> None:
    assert validate_frequency(3) == 3
    assert validate_frequency("2") == 2
    assert validate_frequency(2.0) == 2


def test_build_rejects_non_positive_frequency() -> None:
    with pytest.raises(ScheduleValidationError):
        build_reminder_schedule(0, PROFILE)
