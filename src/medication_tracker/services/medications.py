"""Medication course lifecycle service."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Protocol
from uuid import UUID

from medication_tracker.domain.adherence import (
    DoseProgress,
    DoseStatus,
    MarkDoseResult,
)
from medication_tracker.domain.errors import (
    CourseCompleteError,
    MedicationNotFoundError,
    ScheduleValidationError,
)
from medication_tracker.domain.extraction import DosageExtraction
from medication_tracker.domain.medications import (
    CourseStatus,
    DoseLog,
    Medication,
    PrescriptionGroup,
)
from medication_tracker.domain.profiles import MealTimeProfile
from medication_tracker.services.adherence import (
    compute_last_missed,
    compute_progress,
    day_phase,
    ensure_dose_time,
    resolve_next_dose_across_days,
)
from medication_tracker.services.inference import coerce_number
from medication_tracker.services.profiles import ProfileService
from medication_tracker.services.scheduling import (
    build_reminder_schedule,
    validate_frequency,
)

_logger = logging.getLogger(__name__)


class MedicationRepository(Protocol):
    """Persistence interface for medications."""

    def create_medication(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        dosage: str | None,
        frequency: int,
        reminder_times: list[str],
        days_remaining: int | None,
        prescription_id: UUID | None,
        instructions: str | None,
    ) -> Medication:
        """Create a medication and return it."""

    def get_medication(self, medication_id: UUID) -> Medication | None:
        """Return a medication by id, if present."""

    def list_medications(self, user_id: UUID) -> list[Medication]:
        """Return a user's medications."""

    def update_schedule(
        self, medication_id: UUID, frequency: int, reminder_times: list[str]
    ) -> None:
        """Replace a medication's frequency and reminder times."""

    def complete_course_day(  # noqa: PLR0913
        self,
        medication_id: UUID,
        completed_on: date,
        days_remaining: int,
        expected_days: int,
        expected_completed_on: date | None,
    ) -> bool:
        """Record a completed day if the counter and last day are unchanged."""


class DoseLogRepository(Protocol):
    """Persistence interface for dose logs."""

    def list_taken_times(self, medication_id: UUID, log_date: date) -> set[str]:
        """Return reminder times logged as taken on a date."""

    def list_taken_logs(self, user_id: UUID, log_date: date) -> list[DoseLog]:
        """Return a user's taken logs on a date."""

    def create_taken_log(
        self, user_id: UUID, medication_id: UUID, log_date: date, log_time: str
    ) -> bool:
        """Insert a taken log; return False when one already exists."""


@dataclass
class MedicationService:
    """Service that schedules medications and tracks their courses."""

    medications: MedicationRepository
    dose_logs: DoseLogRepository
    profile_service: ProfileService

    def create_medication(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        dosage: str | None,
        frequency: object,
        *,
        days_remaining: int | None = None,
        prescription_id: UUID | None = None,
        instructions: str | None = None,
        explicit_selection: Sequence[object] | None = None,
        profile: MealTimeProfile | None = None,
    ) -> Medication:
        """Validate the frequency, build reminder times and persist."""
        resolved_frequency = validate_frequency(frequency)
        if days_remaining is not None and days_remaining < 0:
            raise ScheduleValidationError("Days remaining cannot be negative")
        resolved_profile = self._profile_for(user_id, profile)
        reminder_times = build_reminder_schedule(
            resolved_frequency, resolved_profile, explicit_selection
        )
        medication = self.medications.create_medication(
            user_id=user_id,
            name=name,
            dosage=dosage,
            frequency=resolved_frequency,
            reminder_times=reminder_times,
            days_remaining=days_remaining,
            prescription_id=prescription_id,
            instructions=instructions,
        )
        _logger.info(
            "Medication created: id=%s frequency=%s reminder_times=%s",
            medication.id,
            resolved_frequency,
            reminder_times,
        )
        return medication

    def create_from_extraction(
        self,
        user_id: UUID,
        extraction: DosageExtraction,
        profile: MealTimeProfile | None = None,
    ) -> Medication:
        """Create a medication from a label extraction."""
        frequency = coerce_number(extraction.frequency)
        days = coerce_number(extraction.days)
        return self.create_medication(
            user_id=user_id,
            name=extraction.name or "Unnamed medication",
            dosage=extraction.dosage,
            frequency=frequency,
            days_remaining=math.ceil(days) if days and days > 0 else None,
            instructions=extraction.instructions,
            profile=profile,
        )

    def change_frequency(
        self,
        medication_id: UUID,
        frequency: object,
        explicit_selection: Sequence[object] | None = None,
        profile: MealTimeProfile | None = None,
    ) -> Medication:
        """Regenerate reminder times for a new frequency."""
        medication = self._require(medication_id)
        resolved_frequency = validate_frequency(frequency)
        resolved_profile = self._profile_for(medication.user_id, profile)
        reminder_times = build_reminder_schedule(
            resolved_frequency, resolved_profile, explicit_selection
        )
        self.medications.update_schedule(
            medication_id, resolved_frequency, reminder_times
        )
        return replace(
            medication, frequency=resolved_frequency, reminder_times=reminder_times
        )

    def get_status(
        self, medication_id: UUID, now: datetime | None = None
    ) -> DoseStatus:
        """Return today's progress, last missed and next dose."""
        medication = self._require(medication_id)
        current = self._now(medication.user_id, now)
        reminder_times = medication.active_reminder_times
        taken = self.dose_logs.list_taken_times(medication_id, current.date())
        progress = compute_progress(reminder_times, taken, current)
        return DoseStatus(
            medication_id=medication_id,
            progress=progress,
            phase=day_phase(progress),
            last_missed=compute_last_missed(reminder_times, taken, current),
            next_dose=resolve_next_dose_across_days(
                progress, reminder_times, medication.days_remaining
            ),
            days_remaining=medication.days_remaining,
        )

    def mark_dose_taken(
        self, medication_id: UUID, dose_time: object, now: datetime | None = None
    ) -> MarkDoseResult:
        """Record a taken dose and advance the course when the day completes.

        Marking an already taken dose is a no-op. The day-completion decrement
        is decided from the log set re-read after the insert.
        """
        medication = self._require(medication_id)
        if medication.is_terminal:
            raise CourseCompleteError(f"Course for {medication_id} is complete")
        reminder_times = medication.active_reminder_times
        log_time = ensure_dose_time(reminder_times, dose_time)
        current = self._now(medication.user_id, now)
        log_date = current.date()

        taken = self.dose_logs.list_taken_times(medication_id, log_date)
        if log_time in taken:
            _logger.info(
                "Dose already taken: medication_id=%s date=%s time=%s",
                medication_id,
                log_date,
                log_time,
            )
            return _result(medication, compute_progress(reminder_times, taken, current))

        recorded = self.dose_logs.create_taken_log(
            medication.user_id, medication_id, log_date, log_time
        )
        fresh = self.dose_logs.list_taken_times(medication_id, log_date)
        progress = compute_progress(reminder_times, fresh, current)
        if not recorded:
            _logger.info(
                "Duplicate dose log ignored: medication_id=%s date=%s time=%s",
                medication_id,
                log_date,
                log_time,
            )
            return _result(medication, progress)

        _logger.info(
            "Dose taken: medication_id=%s date=%s time=%s (%s/%s)",
            medication_id,
            log_date,
            log_time,
            progress.taken_count,
            progress.total_count,
        )
        if not progress.all_taken:
            return _result(medication, progress, recorded=True)
        updated, decremented = self._complete_day(medication_id, log_date)
        return _result(updated, progress, recorded=True, decremented=decremented)

    def list_grouped(
        self, user_id: UUID, course_status: CourseStatus | None = None
    ) -> list[PrescriptionGroup]:
        """Return a user's medications grouped by prescription.

        ``course_status`` keeps only ongoing or only past courses.
        """
        medications = self.medications.list_medications(user_id)
        if course_status is not None:
            medications = [
                medication
                for medication in medications
                if medication.course_status is course_status
            ]
        return group_by_prescription(medications)

    def _complete_day(
        self, medication_id: UUID, log_date: date
    ) -> tuple[Medication, bool]:
        latest = self._require(medication_id)
        if latest.days_remaining is None or latest.days_remaining <= 0:
            return latest, False
        if latest.last_completed_date == log_date:
            _logger.info(
                "Course day already counted: medication_id=%s date=%s",
                medication_id,
                log_date,
            )
            return latest, False
        remaining = max(latest.days_remaining - 1, 0)
        if not self.medications.complete_course_day(
            medication_id,
            completed_on=log_date,
            days_remaining=remaining,
            expected_days=latest.days_remaining,
            expected_completed_on=latest.last_completed_date,
        ):
            _logger.warning(
                "Days remaining changed concurrently: medication_id=%s", medication_id
            )
            return self._require(medication_id), False
        _logger.info(
            "Course day completed: medication_id=%s days_remaining=%s",
            medication_id,
            remaining,
        )
        if remaining == 0:
            _logger.info("Course completed: medication_id=%s", medication_id)
        return (
            replace(latest, days_remaining=remaining, last_completed_date=log_date),
            True,
        )

    def _profile_for(
        self, user_id: UUID, profile: MealTimeProfile | None
    ) -> MealTimeProfile:
        if profile is not None:
            return profile
        return self.profile_service.get_meal_time_profile(user_id)

    def _require(self, medication_id: UUID) -> Medication:
        medication = self.medications.get_medication(medication_id)
        if medication is None:
            raise MedicationNotFoundError(f"Medication {medication_id} not found")
        return medication

    def _now(self, user_id: UUID, now: datetime | None) -> datetime:
        if now is not None:
            return now
        return datetime.now(tz=self.profile_service.get_zone(user_id))


def group_by_prescription(medications: list[Medication]) -> list[PrescriptionGroup]:
    """Group medications by prescription, standalone medications last."""
    groups: dict[UUID, PrescriptionGroup] = {}
    standalone: list[Medication] = []
    for medication in medications:
        if medication.prescription_id is None:
            standalone.append(medication)
            continue
        group = groups.get(medication.prescription_id)
        if group is None:
            group = PrescriptionGroup(
                prescription_id=medication.prescription_id,
                prescription=medication.prescription,
            )
            groups[medication.prescription_id] = group
        group.medications.append(medication)
    result = list(groups.values())
    if standalone:
        result.append(
            PrescriptionGroup(
                prescription_id=None, prescription=None, medications=standalone
            )
        )
    return result


def _result(
    medication: Medication,
    progress: DoseProgress,
    *,
    recorded: bool = False,
    decremented: bool = False,
) -> MarkDoseResult:
    return MarkDoseResult(
        medication=medication,
        progress=progress,
        phase=day_phase(progress),
        recorded=recorded,
        course_decremented=decremented,
    )
