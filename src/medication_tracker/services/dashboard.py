"""Today overview across a patient's medications."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from medication_tracker.domain.adherence import TodayOverview
from medication_tracker.services.adherence import collect_due_doses
from medication_tracker.services.medications import (
    DoseLogRepository,
    MedicationRepository,
)
from medication_tracker.services.profiles import ProfileService


@dataclass
class DashboardService:
    """Service for the patient's daily dose overview."""

    medications: MedicationRepository
    dose_logs: DoseLogRepository
    profile_service: ProfileService

    def get_today(self, user_id: UUID, now: datetime | None = None) -> TodayOverview:
        """Return doses due within the hour and doses missed so far today."""
        if now is None:
            now = datetime.now(tz=self.profile_service.get_zone(user_id))
        medications = self.medications.list_medications(user_id)
        taken: dict[UUID, set[str]] = {}
        for log in self.dose_logs.list_taken_logs(user_id, now.date()):
            taken.setdefault(log.medication_id, set()).add(log.log_time)
        return collect_due_doses(medications, taken, now)
