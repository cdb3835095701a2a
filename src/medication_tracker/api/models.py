"""Request models for the medication API."""

from uuid import UUID

from pydantic import BaseModel, Field


class CreateMedicationRequest(BaseModel):
    """Payload for creating a medication."""

    user_id: UUID
    name: str
    dosage: str | None = None
    frequency: int
    days_remaining: int | None = Field(default=None, ge=0)
    prescription_id: UUID | None = None
    instructions: str | None = None
    explicit_selection: list[str] | None = None


class ChangeFrequencyRequest(BaseModel):
    """Payload for changing a medication's frequency."""

    frequency: int
    explicit_selection: list[str] | None = None


class MarkDoseRequest(BaseModel):
    """Payload for marking a dose as taken."""

    dose_time: str


class MealSlotPayload(BaseModel):
    """Single named meal time."""

    name: str
    time: str


class MealTimesRequest(BaseModel):
    """Ordered meal-time slots for a patient."""

    slots: list[MealSlotPayload]


class LabelScanRequest(BaseModel):
    """Prescription label image, raw base64 or a data URL."""

    user_id: UUID
    image: str = Field(min_length=1)
