"""Shared Supabase query execution."""

from typing import Any, Protocol

from postgrest.exceptions import APIError

from medication_tracker.domain.errors import StorageError


class _Executable(Protocol):
    def execute(self) -> Any:  # noqa: ANN401
        """Run the query."""


def execute(query: _Executable, action: str) -> Any:  # noqa: ANN401
    """Execute a query, surfacing API failures as storage errors."""
    try:
        return query.execute()
    except APIError as exc:
        raise StorageError(f"Failed to {action}: {exc.message}") from exc
