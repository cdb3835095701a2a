"""Treatment length inference from extracted label quantities."""

import math
import re

from medication_tracker.domain.extraction import DosageExtraction

_NON_NUMERIC = re.compile(r"[^0-9.]")
# "12 tablets" and "1/2 tablet" must not read as two units.
_MULTI_UNIT_DOSE = re.compile(
    r"(?<![\d./])([23])\s*(?:tablet|capsule|pill)", re.IGNORECASE
)


def coerce_number(value: object) -> float | None:
    """Strip non-numeric characters and return the number, if any."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def units_per_dose(dosage_text: str | None) -> int:
    """Return how many units are taken per dose according to the dosage text."""
    if not dosage_text:
        return 1
    match = _MULTI_UNIT_DOSE.search(dosage_text)
    if match is None:
        return 1
    return int(match.group(1))


def infer_days(
    quantity: object, frequency: object, dosage_text: str | None = None
) -> int | None:
    """Infer how many days a dispensed quantity lasts, or None when unknown."""
    total = coerce_number(quantity)
    per_day = coerce_number(frequency)
    if total is None or per_day is None or per_day <= 0:
        return None
    days = math.ceil(total / (per_day * units_per_dose(dosage_text)))
    return max(days, 1)


def fill_missing_days(extraction: DosageExtraction) -> DosageExtraction:
    """Return the extraction with ``days`` inferred when it was not given."""
    explicit = coerce_number(extraction.days)
    if explicit is not None and explicit > 0:
        return extraction
    inferred = infer_days(extraction.quantity, extraction.frequency, extraction.dosage)
    return extraction.model_copy(update={"days": inferred})
