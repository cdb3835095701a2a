"""Patient profile service for meal times and timezone."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from medication_tracker.domain.profiles import MealTimeProfile

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for patient profiles."""

    def get_meal_times(self, user_id: UUID) -> MealTimeProfile | None:
        """Return the user's meal-time profile if set."""

    def set_meal_times(self, user_id: UUID, profile: MealTimeProfile) -> None:
        """Store the user's meal-time profile."""

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the user's timezone if set."""


@dataclass
class ProfileService:
    """Service for patient profile preferences."""

    repository: ProfileRepository
    default_timezone: str = "UTC"

    def get_meal_time_profile(self, user_id: UUID) -> MealTimeProfile:
        """Return the user's meal times, or an empty profile."""
        return self.repository.get_meal_times(user_id) or MealTimeProfile()

    def set_meal_times(self, user_id: UUID, profile: MealTimeProfile) -> None:
        """Persist a user's meal times."""
        self.repository.set_meal_times(user_id, profile)

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the default if unset."""
        return self.repository.get_timezone(user_id) or self.default_timezone

    def get_zone(self, user_id: UUID) -> ZoneInfo:
        """Return the user's zone, falling back to the default for unknown names."""
        timezone_name = self.get_timezone(user_id)
        try:
            return ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError):
            _logger.warning(
                "Unknown timezone %r for user_id=%s, using %s",
                timezone_name,
                user_id,
                self.default_timezone,
            )
            return ZoneInfo(self.default_timezone)
