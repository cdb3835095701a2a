"""Prescription label extraction service using LLMs."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from medication_tracker.domain.extraction import DosageExtraction
from medication_tracker.services.inference import fill_missing_days

_logger = logging.getLogger(__name__)

_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}
_NULLABLE_NUMBER = {"anyOf": [{"type": "number"}, {"type": "null"}]}

EXTRACTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": _NULLABLE_STRING,
        "dosage": _NULLABLE_STRING,
        "frequency": _NULLABLE_NUMBER,
        "quantity": _NULLABLE_NUMBER,
        "days": _NULLABLE_NUMBER,
        "instructions": _NULLABLE_STRING,
    },
    "required": ["name", "dosage", "frequency", "quantity", "days", "instructions"],
    "additionalProperties": False,
}

EXTRACTION_PROMPT = (
    "Extract the medicine from this prescription label. "
    "Return the medicine name, the dosage as written (e.g. '500mg tablet'), "
    "the number of doses per day, the total quantity dispensed, the number of "
    "days of treatment if stated, and any instructions. "
    "Use null for anything that is not on the label."
)


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass
class LabelExtractionService:
    """Service that prepares extraction prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract(self, image: bytes | str) -> DosageExtraction:
        """Extract dosage details from a label image and backfill the day count."""
        data_url = image if isinstance(image, str) else _to_data_url(image)
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=data_url,
            schema=EXTRACTION_SCHEMA,
            prompt=EXTRACTION_PROMPT,
        )
        extraction = fill_missing_days(DosageExtraction.model_validate(raw))
        _logger.info(
            "Label extracted: name=%s frequency=%s days=%s",
            extraction.name,
            extraction.frequency,
            extraction.days,
        )
        return extraction


def decode_image_payload(payload: str) -> bytes | str:
    """Return a data URL as-is, otherwise decode raw base64 into bytes."""
    if payload.startswith("data:"):
        return payload
    return base64.b64decode(payload, validate=True)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
