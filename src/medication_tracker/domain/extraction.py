"""Models for prescription label extraction results."""

from pydantic import BaseModel


class DosageExtraction(BaseModel):
    """Structured output for label extraction.

    Values are kept as extracted; numeric fields may arrive as text such as
    ``"30 tablets"`` and are coerced downstream.
    """

    name: str | None = None
    dosage: str | None = None
    frequency: int | float | str | None = None
    quantity: int | float | str | None = None
    days: int | float | str | None = None
    instructions: str | None = None
