"""ASGI entrypoint for the medication tracker API."""

from medication_tracker.api.app import create_app
from medication_tracker.containers import build_container

app = create_app(build_container())
