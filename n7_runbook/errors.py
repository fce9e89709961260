"""
Runbook error taxonomy.

UnknownStepError is surfaced to callers (it signals a UI or integration bug).
PersistenceReadError never leaves the status store: unreadable progress
degrades to all-pending defaults.
"""


class RunbookError(Exception):
    """Base class for all N7-Runbook errors."""


class UnknownStepError(RunbookError, KeyError):
    """An operation referenced a step identity that is not in the catalog."""

    def __init__(self, step_id: str):
        super().__init__(step_id)
        self.step_id = step_id

    def __str__(self) -> str:
        return f"Unknown step '{self.step_id}'"


class PersistenceReadError(RunbookError):
    """Persisted progress is missing or cannot be parsed."""


class CatalogError(RunbookError):
    """The step catalog document is malformed."""


class InvalidMetadataError(RunbookError, ValueError):
    """An incident metadata edit named an unknown field or carried an invalid value."""


class ExportError(RunbookError):
    """An audit report could not be materialized by the export sink."""
