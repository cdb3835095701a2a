"""Domain models for medications and dose logs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID

TAKEN_STATUS = "taken"


class CourseStatus(Enum):
    """Whether a course still has days to take."""

    ONGOING = "ongoing"
    PAST = "past"


@dataclass(frozen=True)
class Prescription:
    """Prescription grouping a set of medications."""

    id: UUID
    doctor_name: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Medication:
    """Medication with its daily reminder schedule and course counter.

    ``days_remaining`` of ``None`` means the course is unlimited.
    ``last_completed_date`` is the calendar day last counted against the course.
    """

    id: UUID
    user_id: UUID
    name: str
    dosage: str | None
    frequency: int
    reminder_times: list[str]
    days_remaining: int | None = None
    prescription_id: UUID | None = None
    prescription: Prescription | None = None
    instructions: str | None = None
    last_completed_date: date | None = None

    @property
    def is_unlimited(self) -> bool:
        """Return True when the course has no end date."""
        return self.days_remaining is None

    @property
    def is_terminal(self) -> bool:
        """Return True when the course has run out of days."""
        return self.days_remaining is not None and self.days_remaining <= 0

    @property
    def course_status(self) -> CourseStatus:
        """Past once the course has run out of days, ongoing otherwise."""
        return CourseStatus.PAST if self.is_terminal else CourseStatus.ONGOING

    @property
    def active_reminder_times(self) -> list[str]:
        """Reminder times truncated to the active frequency."""
        return self.reminder_times[: self.frequency]


@dataclass(frozen=True)
class DoseLog:
    """Record that a reminder time was fulfilled on a date."""

    medication_id: UUID
    log_date: date
    log_time: str
    status: str = TAKEN_STATUS
    created_at: datetime | None = None


@dataclass(frozen=True)
class PrescriptionGroup:
    """Medications sharing a prescription; ``prescription`` is None for others."""

    prescription_id: UUID | None
    prescription: Prescription | None
    medications: list[Medication] = field(default_factory=list)
