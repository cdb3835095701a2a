"""Supabase repository for medications."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from medication_tracker.adapters.supabase_query import execute
from medication_tracker.domain.errors import StorageError
from medication_tracker.domain.medications import Medication, Prescription
from medication_tracker.domain.time_of_day import normalize_time_of_day
from medication_tracker.services.medications import MedicationRepository

_COLUMNS = (
    "id, user_id, name, dosage, frequency, reminder_times, days_remaining, "
    "prescription_id, instructions, last_completed_date, "
    "prescriptions(id, doctor_name, notes)"
)


@dataclass
class SupabaseMedicationRepository(MedicationRepository):
    """Supabase implementation for medications."""

    client: Client

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
        """Create a medication row and return it."""
        response = execute(
            self.client.table("medications").insert(
                {
                    "user_id": str(user_id),
                    "name": name,
                    "dosage": dosage,
                    "frequency": frequency,
                    "reminder_times": reminder_times,
                    "days_remaining": days_remaining,
                    "prescription_id": str(prescription_id)
                    if prescription_id
                    else None,
                    "instructions": instructions,
                }
            ),
            "create medication",
        )
        if not response.data:
            raise StorageError("Failed to create medication")
        return _parse_medication(response.data[0])

    def get_medication(self, medication_id: UUID) -> Medication | None:
        """Return a medication by id."""
        response = execute(
            self.client.table("medications")
            .select(_COLUMNS)
            .eq("id", str(medication_id))
            .limit(1),
            "read medication",
        )
        if not response.data:
            return None
        return _parse_medication(response.data[0])

    def list_medications(self, user_id: UUID) -> list[Medication]:
        """Return a user's medications."""
        response = execute(
            self.client.table("medications")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=False),
            "list medications",
        )
        return [_parse_medication(row) for row in response.data or []]

    def update_schedule(
        self, medication_id: UUID, frequency: int, reminder_times: list[str]
    ) -> None:
        """Replace frequency and reminder times."""
        execute(
            self.client.table("medications")
            .update({"frequency": frequency, "reminder_times": reminder_times})
            .eq("id", str(medication_id)),
            "update medication schedule",
        )

    def complete_course_day(  # noqa: PLR0913
        self,
        medication_id: UUID,
        completed_on: date,
        days_remaining: int,
        expected_days: int,
        expected_completed_on: date | None,
    ) -> bool:
        """Compare-and-set the counter and last completed day."""
        query = (
            self.client.table("medications")
            .update(
                {
                    "days_remaining": days_remaining,
                    "last_completed_date": completed_on.isoformat(),
                }
            )
            .eq("id", str(medication_id))
            .eq("days_remaining", expected_days)
        )
        if expected_completed_on is None:
            query = query.is_("last_completed_date", "null")
        else:
            query = query.eq("last_completed_date", expected_completed_on.isoformat())
        response = execute(query, "complete course day")
        return bool(response.data)


def _parse_medication(row: dict[str, object]) -> Medication:
    frequency = int(row.get("frequency") or 1)
    prescription_row = row.get("prescriptions")
    return Medication(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name") or ""),
        dosage=row.get("dosage"),
        frequency=frequency,
        reminder_times=[
            normalize_time_of_day(value) for value in row.get("reminder_times") or []
        ],
        days_remaining=_parse_days_remaining(row.get("days_remaining")),
        prescription_id=UUID(str(row["prescription_id"]))
        if row.get("prescription_id")
        else None,
        prescription=_parse_prescription(prescription_row)
        if isinstance(prescription_row, dict)
        else None,
        instructions=row.get("instructions"),
        last_completed_date=date.fromisoformat(str(row["last_completed_date"]))
        if row.get("last_completed_date")
        else None,
    )


def _parse_prescription(row: dict[str, object]) -> Prescription:
    return Prescription(
        id=UUID(str(row["id"])),
        doctor_name=row.get("doctor_name"),
        notes=row.get("notes"),
    )


def _parse_days_remaining(value: object) -> int | None:
    # Older rows store the counter as text.
    if value is None or value == "":
        return None
    return max(int(value), 0)
