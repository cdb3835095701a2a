"""Errors raised by the dosing schedule and adherence engine."""


class MedicationError(Exception):
    """Base class for medication engine errors."""


class ScheduleValidationError(MedicationError, ValueError):
    """Raised when a frequency or time of day cannot form a schedule."""


class RejectedDoseError(MedicationError, ValueError):
    """Raised when a dose time is not part of the medication's schedule."""


class CourseCompleteError(MedicationError):
    """Raised when a dose is marked on a medication whose course has ended."""


class MedicationNotFoundError(MedicationError, LookupError):
    """Raised when a medication id does not resolve to a record."""


class StorageError(MedicationError, RuntimeError):
    """Raised when the backing store fails to read or write."""
