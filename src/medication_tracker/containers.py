"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from medication_tracker.adapters.openai_vision_client import OpenAIVisionClient
from medication_tracker.adapters.supabase_dose_log_repository import (
    SupabaseDoseLogRepository,
)
from medication_tracker.adapters.supabase_medication_repository import (
    SupabaseMedicationRepository,
)
from medication_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from medication_tracker.config import Settings
from medication_tracker.services.dashboard import DashboardService
from medication_tracker.services.extraction import LabelExtractionService
from medication_tracker.services.medications import MedicationService
from medication_tracker.services.profiles import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    medication_service: MedicationService
    dashboard_service: DashboardService
    extraction_service: LabelExtractionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    medication_repository = SupabaseMedicationRepository(supabase_client)
    dose_log_repository = SupabaseDoseLogRepository(supabase_client)
    profile_service = ProfileService(
        repository=SupabaseProfileRepository(supabase_client),
        default_timezone=resolved_settings.default_timezone,
    )
    medication_service = MedicationService(
        medications=medication_repository,
        dose_logs=dose_log_repository,
        profile_service=profile_service,
    )
    dashboard_service = DashboardService(
        medications=medication_repository,
        dose_logs=dose_log_repository,
        profile_service=profile_service,
    )
    vision_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    extraction_service = LabelExtractionService(
        client=vision_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        medication_service=medication_service,
        dashboard_service=dashboard_service,
        extraction_service=extraction_service,
        close_resources=close_resources,
    )
