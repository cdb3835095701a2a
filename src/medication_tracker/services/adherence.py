"""Dose adherence calculations over a day's reminder times and taken logs."""

from collections.abc import Collection, Iterable, Mapping, Sequence
from datetime import datetime, time, timedelta
from uuid import UUID

from medication_tracker.domain.adherence import (
    DayPhase,
    DoseProgress,
    DueDose,
    NextDose,
    TodayOverview,
)
from medication_tracker.domain.errors import RejectedDoseError, ScheduleValidationError
from medication_tracker.domain.medications import Medication
from medication_tracker.domain.time_of_day import (
    normalize_time_of_day,
    parse_time_of_day,
)

UPCOMING_WINDOW = timedelta(minutes=60)


def compute_progress(
    reminder_times: Sequence[str], taken_times: Collection[str], now: datetime
) -> DoseProgress:
    """Summarize today's doses and pick the next one to take.

    When every untaken dose has already elapsed, the earliest of them is
    still returned as next so it can be logged late.
    """
    current = _clock(now)
    untaken = [value for value in reminder_times if value not in taken_times]
    taken_count = len(reminder_times) - len(untaken)
    if not untaken:
        return DoseProgress(
            taken_count=taken_count,
            total_count=len(reminder_times),
            next_dose_time=None,
            all_taken=True,
        )
    future = [value for value in untaken if parse_time_of_day(value) > current]
    return DoseProgress(
        taken_count=taken_count,
        total_count=len(reminder_times),
        next_dose_time=_earliest(future or untaken),
        all_taken=False,
    )


def compute_last_missed(
    reminder_times: Sequence[str], taken_times: Collection[str], now: datetime
) -> str | None:
    """Return the latest elapsed reminder time that was not taken."""
    current = _clock(now)
    missed = [
        value
        for value in reminder_times
        if value not in taken_times and parse_time_of_day(value) < current
    ]
    if not missed:
        return None
    return max(missed, key=parse_time_of_day)


def resolve_next_dose_across_days(
    progress: DoseProgress,
    reminder_times: Sequence[str],
    days_remaining: int | None,
) -> NextDose | None:
    """Return today's next dose, tomorrow's first dose, or None when finished."""
    if days_remaining is not None and days_remaining <= 0:
        return None
    if progress.next_dose_time is not None:
        return NextDose(time=progress.next_dose_time, day_offset=0)
    if not reminder_times:
        return None
    return NextDose(time=_earliest(reminder_times), day_offset=1)


def day_phase(progress: DoseProgress) -> DayPhase:
    """Return the day's phase for the given progress."""
    if progress.all_taken:
        return DayPhase.COMPLETE
    if progress.taken_count == 0:
        return DayPhase.PENDING
    return DayPhase.PARTIAL


def ensure_dose_time(reminder_times: Sequence[str], dose_time: object) -> str:
    """Normalize a dose time and check it belongs to the schedule."""
    try:
        normalized = normalize_time_of_day(dose_time)
    except ScheduleValidationError as exc:
        raise RejectedDoseError(f"Invalid dose time: {dose_time!r}") from exc
    if normalized not in reminder_times:
        raise RejectedDoseError(f"{normalized} is not a scheduled reminder time")
    return normalized


def collect_due_doses(
    medications: Iterable[Medication],
    taken_by_medication: Mapping[UUID, Collection[str]],
    now: datetime,
    window: timedelta = UPCOMING_WINDOW,
) -> TodayOverview:
    """List untaken doses due within ``window`` and those already elapsed."""
    current = _seconds(_clock(now))
    horizon = current + int(window.total_seconds())
    upcoming: list[DueDose] = []
    missed: list[DueDose] = []
    for medication in medications:
        if medication.is_terminal:
            continue
        taken = taken_by_medication.get(medication.id, ())
        for value in dict.fromkeys(medication.active_reminder_times):
            if value in taken:
                continue
            due = _seconds(parse_time_of_day(value))
            dose = DueDose(medication_id=medication.id, name=medication.name, time=value)
            if current <= due < horizon:
                upcoming.append(dose)
            elif due < current:
                missed.append(dose)
    return TodayOverview(upcoming=_by_time(upcoming), missed=_by_time(missed))


def _clock(now: datetime) -> time:
    return now.time().replace(tzinfo=None)


def _earliest(values: Iterable[str]) -> str:
    return min(values, key=parse_time_of_day)


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def _by_time(doses: list[DueDose]) -> list[DueDose]:
    return sorted(doses, key=lambda dose: (dose.time, dose.name))
