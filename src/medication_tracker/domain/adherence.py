"""Domain models for dose adherence tracking."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from medication_tracker.domain.medications import Medication


class DayPhase(Enum):
    """Progress of a medication through one calendar day."""

    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(frozen=True)
class DoseProgress:
    """Summary of today's doses for one medication."""

    taken_count: int
    total_count: int
    next_dose_time: str | None
    all_taken: bool


@dataclass(frozen=True)
class NextDose:
    """Next dose to take; ``day_offset`` is 0 for today and 1 for tomorrow."""

    time: str
    day_offset: int = 0


@dataclass(frozen=True)
class DoseStatus:
    """Derived display state for a medication."""

    medication_id: UUID
    progress: DoseProgress
    phase: DayPhase
    last_missed: str | None
    next_dose: NextDose | None
    days_remaining: int | None


@dataclass(frozen=True)
class MarkDoseResult:
    """Outcome of marking a dose as taken."""

    medication: Medication
    progress: DoseProgress
    phase: DayPhase
    recorded: bool
    course_decremented: bool


@dataclass(frozen=True)
class DueDose:
    """Dose of a medication at a reminder time today."""

    medication_id: UUID
    name: str
    time: str


@dataclass(frozen=True)
class TodayOverview:
    """Doses coming up soon and doses already missed today."""

    upcoming: list[DueDose]
    missed: list[DueDose]
