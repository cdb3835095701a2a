"""Supabase repository for dose logs."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from medication_tracker.adapters.supabase_query import execute
from medication_tracker.domain.medications import TAKEN_STATUS, DoseLog
from medication_tracker.domain.time_of_day import normalize_time_of_day
from medication_tracker.services.medications import DoseLogRepository

# Unique key backing idempotent dose marking.
_LOG_KEY = "medication_id,log_date,log_time"


@dataclass
class SupabaseDoseLogRepository(DoseLogRepository):
    """Supabase implementation for dose logs."""

    client: Client

    def list_taken_times(self, medication_id: UUID, log_date: date) -> set[str]:
        """Return reminder times taken on a date."""
        response = execute(
            self.client.table("medication_logs")
            .select("log_time")
            .eq("medication_id", str(medication_id))
            .eq("log_date", log_date.isoformat())
            .eq("status", TAKEN_STATUS),
            "read dose logs",
        )
        return {normalize_time_of_day(row["log_time"]) for row in response.data or []}

    def list_taken_logs(self, user_id: UUID, log_date: date) -> list[DoseLog]:
        """Return a user's taken logs on a date."""
        response = execute(
            self.client.table("medication_logs")
            .select("medication_id, log_date, log_time, status, created_at")
            .eq("user_id", str(user_id))
            .eq("log_date", log_date.isoformat())
            .eq("status", TAKEN_STATUS),
            "read dose logs",
        )
        return [_parse_log(row) for row in response.data or []]

    def create_taken_log(
        self, user_id: UUID, medication_id: UUID, log_date: date, log_time: str
    ) -> bool:
        """Insert a taken log, ignoring a duplicate on the unique key."""
        response = execute(
            self.client.table("medication_logs").upsert(
                {
                    "user_id": str(user_id),
                    "medication_id": str(medication_id),
                    "log_date": log_date.isoformat(),
                    "log_time": log_time,
                    "status": TAKEN_STATUS,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict=_LOG_KEY,
                ignore_duplicates=True,
            ),
            "write dose log",
        )
        return bool(response.data)


def _parse_log(row: dict[str, object]) -> DoseLog:
    created_at = row.get("created_at")
    return DoseLog(
        medication_id=UUID(str(row["medication_id"])),
        log_date=date.fromisoformat(str(row["log_date"])),
        log_time=normalize_time_of_day(row["log_time"]),
        status=str(row.get("status") or TAKEN_STATUS),
        created_at=datetime.fromisoformat(str(created_at)) if created_at else None,
    )
