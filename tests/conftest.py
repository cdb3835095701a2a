"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from medication_tracker.config import Settings
from medication_tracker.containers import AppContainer
from medication_tracker.domain.medications import DoseLog, Medication
from medication_tracker.domain.profiles import MealTimeProfile
from medication_tracker.services.dashboard import DashboardService
from medication_tracker.services.extraction import LabelExtractionService, VisionClient
from medication_tracker.services.medications import (
    DoseLogRepository,
    MedicationRepository,
    MedicationService,
)
from medication_tracker.services.profiles import ProfileRepository, ProfileService

DEFAULT_MEAL_TIMES = {"breakfast": "08:00", "lunch": "13:00", "dinner": "19:00"}


def at(clock: str, day: date = date(2024, 1, 15)) -> datetime:
    """Return a UTC datetime on ``day`` at ``HH:MM``."""
    hour, minute = (int(part) for part in clock.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


@dataclass
class InMemoryMedicationRepository(MedicationRepository):
    """In-memory medication repository for tests."""

    medications: dict[UUID, Medication] = field(default_factory=dict)
    fail_next_update: bool = False

    def add(self, medication: Medication) -> Medication:
        self.medications[medication.id] = medication
        return medication

    def create_medication(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        dosage: str | None,
        frequency: int,
        reminder_times: list[str],
        days_remaining: int | None,
        prescription_id: UUID | None,
        instructions: str | None,
    ) -> Medication:
        return self.add(
            Medication(
                id=uuid4(),
                user_id=user_id,
                name=name,
                dosage=dosage,
                frequency=frequency,
                reminder_times=list(reminder_times),
                days_remaining=days_remaining,
                prescription_id=prescription_id,
                instructions=instructions,
            )
        )

    def get_medication(self, medication_id: UUID) -> Medication | None:
        return self.medications.get(medication_id)

    def list_medications(self, user_id: UUID) -> list[Medication]:
        return [med for med in self.medications.values() if med.user_id == user_id]

    def update_schedule(
        self, medication_id: UUID, frequency: int, reminder_times: list[str]
    ) -> None:
        current = self.medications[medication_id]
        self.medications[medication_id] = replace(
            current, frequency=frequency, reminder_times=list(reminder_times)
        )

    def complete_course_day(  # noqa: PLR0913
        self,
        medication_id: UUID,
        completed_on: date,
        days_remaining: int,
        expected_days: int,
        expected_completed_on: date | None,
    ) -> bool:
        current = self.medications[medication_id]
        if (
            self.fail_next_update
            or current.days_remaining != expected_days
            or current.last_completed_date != expected_completed_on
        ):
            self.fail_next_update = False
            return False
        self.medications[medication_id] = replace(
            current, days_remaining=days_remaining, last_completed_date=completed_on
        )
        return True


@dataclass
class InMemoryDoseLogRepository(DoseLogRepository):
    """In-memory dose log repository enforcing the unique log key."""

    logs: dict[tuple[UUID, date, str], tuple[UUID, DoseLog]] = field(
        default_factory=dict
    )
    insert_attempts: int = 0

    def list_taken_times(self, medication_id: UUID, log_date: date) -> set[str]:
        return {
            log_time
            for (med_id, day, log_time) in self.logs
            if med_id == medication_id and day == log_date
        }

    def list_taken_logs(self, user_id: UUID, log_date: date) -> list[DoseLog]:
        return [
            log
            for owner, log in self.logs.values()
            if owner == user_id and log.log_date == log_date
        ]

    def create_taken_log(
        self, user_id: UUID, medication_id: UUID, log_date: date, log_time: str
    ) -> bool:
        self.insert_attempts += 1
        key = (medication_id, log_date, log_time)
        if key in self.logs:
            return False
        self.logs[key] = (
            user_id,
            DoseLog(
                medication_id=medication_id,
                log_date=log_date,
                log_time=log_time,
                created_at=datetime.now(tz=UTC),
            ),
        )
        return True


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    meal_times: dict[UUID, MealTimeProfile] = field(default_factory=dict)
    timezones: dict[UUID, str] = field(default_factory=dict)

    def get_meal_times(self, user_id: UUID) -> MealTimeProfile | None:
        return self.meal_times.get(user_id)

    def set_meal_times(self, user_id: UUID, profile: MealTimeProfile) -> None:
        self.meal_times[user_id] = profile

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Amoxicillin",
            "dosage": "500mg capsule",
            "frequency": 3,
            "quantity": 21,
            "days": None,
            "instructions": "Take after meals",
        }
    )
    image_urls: list[str] = field(default_factory=list)

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
        self.image_urls.append(image_data_url)
        return self.payload


@dataclass
class Repositories:
    """In-memory repositories shared by the services under test."""

    medications: InMemoryMedicationRepository = field(
        default_factory=InMemoryMedicationRepository
    )
    dose_logs: InMemoryDoseLogRepository = field(
        default_factory=InMemoryDoseLogRepository
    )
    profiles: InMemoryProfileRepository = field(
        default_factory=InMemoryProfileRepository
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key.test.signature",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def repositories() -> Repositories:
    return Repositories()


@pytest.fixture
def user_id(repositories: Repositories) -> UUID:
    user = uuid4()
    repositories.profiles.meal_times[user] = MealTimeProfile.from_mapping(
        DEFAULT_MEAL_TIMES
    )
    return user


@pytest.fixture
def profile_service(repositories: Repositories) -> ProfileService:
    return ProfileService(repositories.profiles)


@pytest.fixture
def medication_service(
    repositories: Repositories, profile_service: ProfileService
) -> MedicationService:
    return MedicationService(
        medications=repositories.medications,
        dose_logs=repositories.dose_logs,
        profile_service=profile_service,
    )


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def container(
    settings: Settings,
    repositories: Repositories,
    profile_service: ProfileService,
    medication_service: MedicationService,
    vision_client: FakeVisionClient,
) -> AppContainer:
    dashboard_service = DashboardService(
        medications=repositories.medications,
        dose_logs=repositories.dose_logs,
        profile_service=profile_service,
    )
    extraction_service = LabelExtractionService(
        client=vision_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        profile_service=profile_service,
        medication_service=medication_service,
        dashboard_service=dashboard_service,
        extraction_service=extraction_service,
        close_resources=close_resources,
    )
