"""Supabase repository for patient profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from medication_tracker.adapters.supabase_query import execute
from medication_tracker.domain.profiles import CANONICAL_SLOTS, MealTimeProfile
from medication_tracker.domain.time_of_day import normalize_time_of_day
from medication_tracker.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for patient profiles."""

    client: Client

    def get_meal_times(self, user_id: UUID) -> MealTimeProfile | None:
        """Return the stored meal-time profile for a user."""
        response = execute(
            self.client.table("profiles")
            .select("meal_times")
            .eq("user_id", str(user_id))
            .limit(1),
            "read meal times",
        )
        if not response.data:
            return None
        return _parse_meal_times(response.data[0].get("meal_times"))

    def set_meal_times(self, user_id: UUID, profile: MealTimeProfile) -> None:
        """Store meal times as an ordered list of slots."""
        execute(
            self.client.table("profiles")
            .update(
                {
                    "meal_times": profile.to_rows(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("user_id", str(user_id)),
            "update meal times",
        )

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the stored timezone for a user."""
        response = execute(
            self.client.table("profiles")
            .select("timezone")
            .eq("user_id", str(user_id))
            .limit(1),
            "read timezone",
        )
        if not response.data:
            return None
        return response.data[0].get("timezone")


def _parse_meal_times(raw: object) -> MealTimeProfile | None:
    if isinstance(raw, list):
        return MealTimeProfile.from_rows(row for row in raw if isinstance(row, dict))
    if isinstance(raw, dict):
        # jsonb objects do not keep key order; custom slots go by time, then name.
        custom = sorted(
            (
                (normalize_time_of_day(value), name)
                for name, value in raw.items()
                if name not in CANONICAL_SLOTS and value
            ),
        )
        ordered = {name: raw[name] for name in CANONICAL_SLOTS if raw.get(name)}
        ordered.update({name: value for value, name in custom})
        return MealTimeProfile.from_mapping(ordered)
    return None
