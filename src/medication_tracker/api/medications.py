"""Medication API endpoints with simple token auth."""

from __future__ import annotations

import binascii
import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    Header,
    HTTPException,
    Query,
    Request,
    status,
)

from medication_tracker.api.models import (
    ChangeFrequencyRequest,
    CreateMedicationRequest,
    LabelScanRequest,
    MarkDoseRequest,
    MealTimesRequest,
)
from medication_tracker.domain.medications import CourseStatus
from medication_tracker.domain.profiles import MealSlot, MealTimeProfile
from medication_tracker.domain.time_of_day import normalize_time_of_day
from medication_tracker.services.extraction import decode_image_payload

if TYPE_CHECKING:
    from medication_tracker.containers import AppContainer

router = APIRouter(tags=["medications"])
_logger = logging.getLogger(__name__)


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post(
    "/medications",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_token)],
)
async def create_medication(
    payload: CreateMedicationRequest, request: Request
) -> dict[str, object]:
    """Create a medication with reminder times from the patient's meal times."""
    container: AppContainer = request.app.state.container
    medication = container.medication_service.create_medication(
        user_id=payload.user_id,
        name=payload.name,
        dosage=payload.dosage,
        frequency=payload.frequency,
        days_remaining=payload.days_remaining,
        prescription_id=payload.prescription_id,
        instructions=payload.instructions,
        explicit_selection=payload.explicit_selection,
    )
    return {"medication": medication}


@router.put(
    "/medications/{medication_id}/frequency",
    dependencies=[Depends(require_api_token)],
)
async def change_frequency(
    medication_id: UUID, payload: ChangeFrequencyRequest, request: Request
) -> dict[str, object]:
    """Regenerate reminder times for a new frequency."""
    container: AppContainer = request.app.state.container
    medication = container.medication_service.change_frequency(
        medication_id, payload.frequency, payload.explicit_selection
    )
    return {"medication": medication}


@router.get(
    "/medications/{medication_id}/status",
    dependencies=[Depends(require_api_token)],
)
async def medication_status(medication_id: UUID, request: Request) -> dict[str, object]:
    """Return today's progress, last missed and next dose."""
    container: AppContainer = request.app.state.container
    return {"status": container.medication_service.get_status(medication_id)}


@router.post(
    "/medications/{medication_id}/doses",
    dependencies=[Depends(require_api_token)],
)
async def mark_dose_taken(
    medication_id: UUID, payload: MarkDoseRequest, request: Request
) -> dict[str, object]:
    """Mark a scheduled dose as taken today."""
    container: AppContainer = request.app.state.container
    result = container.medication_service.mark_dose_taken(
        medication_id, payload.dose_time
    )
    return {"result": result}


@router.get(
    "/users/{user_id}/medications",
    dependencies=[Depends(require_api_token)],
)
async def list_medications(
    user_id: UUID,
    request: Request,
    course_status: CourseStatus | None = Query(default=None, alias="status"),
) -> dict[str, object]:
    """Return a user's medications grouped by prescription.

    ``?status=ongoing`` or ``?status=past`` keeps only those courses.
    """
    container: AppContainer = request.app.state.container
    groups = container.medication_service.list_grouped(user_id, course_status)
    return {"groups": groups}


@router.get("/users/{user_id}/today", dependencies=[Depends(require_api_token)])
async def today_overview(user_id: UUID, request: Request) -> dict[str, object]:
    """Return upcoming and missed doses for today."""
    container: AppContainer = request.app.state.container
    return {"today": container.dashboard_service.get_today(user_id)}


@router.put(
    "/users/{user_id}/meal-times",
    dependencies=[Depends(require_api_token)],
)
async def set_meal_times(
    user_id: UUID, payload: MealTimesRequest, request: Request
) -> dict[str, object]:
    """Store the patient's ordered meal times."""
    container: AppContainer = request.app.state.container
    profile = MealTimeProfile(
        slots=tuple(
            MealSlot(name=slot.name, time=normalize_time_of_day(slot.time))
            for slot in payload.slots
        )
    )
    container.profile_service.set_meal_times(user_id, profile)
    return {"meal_times": profile.to_rows()}


@router.post(
    "/ocr/medication",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_token)],
)
async def scan_label(payload: LabelScanRequest, request: Request) -> dict[str, object]:
    """Extract a medication from a label photo and store it."""
    container: AppContainer = request.app.state.container
    try:
        image = decode_image_payload(payload.image)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image payload"
        ) from exc
    try:
        extraction = await container.extraction_service.extract(image)
    except Exception as exc:
        _logger.exception("Label extraction failed", extra={"user_id": payload.user_id})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Label extraction failed",
        ) from exc
    medication = container.medication_service.create_from_extraction(
        payload.user_id, extraction
    )
    return {"extraction": extraction.model_dump(), "medication": medication}
