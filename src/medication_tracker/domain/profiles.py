"""Meal-time profile models."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from medication_tracker.domain.time_of_day import normalize_time_of_day

CANONICAL_SLOTS = ("breakfast", "lunch", "dinner")


@dataclass(frozen=True)
class MealSlot:
    """Named daily time anchor."""

    name: str
    time: str


@dataclass(frozen=True)
class MealTimeProfile:
    """Ordered list of a patient's meal-time slots."""

    slots: tuple[MealSlot, ...] = ()

    @classmethod
    def from_mapping(cls, meal_times: Mapping[str, object]) -> "MealTimeProfile":
        """Build a profile with canonical slots first, then custom slots in order."""
        slots = [
            MealSlot(name=name, time=normalize_time_of_day(meal_times[name]))
            for name in CANONICAL_SLOTS
            if meal_times.get(name)
        ]
        slots.extend(
            MealSlot(name=name, time=normalize_time_of_day(value))
            for name, value in meal_times.items()
            if name not in CANONICAL_SLOTS and value
        )
        return cls(slots=tuple(slots))

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, object]]) -> "MealTimeProfile":
        """Build a profile from stored ``{"name", "time"}`` rows, keeping order."""
        return cls(
            slots=tuple(
                MealSlot(
                    name=str(row.get("name") or ""),
                    time=normalize_time_of_day(row.get("time")),
                )
                for row in rows
                if row.get("time")
            )
        )

    @property
    def times(self) -> list[str]:
        """Slot times in profile order."""
        return [slot.time for slot in self.slots]

    def to_rows(self) -> list[dict[str, str]]:
        """Serialize to an ordered list of rows."""
        return [{"name": slot.name, "time": slot.time} for slot in self.slots]
