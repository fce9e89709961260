"""
Navigation Cursor.

Tracks which step is presented to the operator. Movement is always in full
catalog order; the session re-anchors the cursor against the active filter
view afterwards (see reconcile).
"""

import logging
from typing import Optional

from ..catalog.catalog import StepCatalog
from ..errors import UnknownStepError
from ..filter.projection import FilterView
from ..schemas.step import Status, StepDefinition
from ..status_store.service import StatusStore

logger = logging.getLogger("n7-runbook.navigation")


class NavigationCursor:
    def __init__(self, catalog: StepCatalog):
        self._catalog = catalog
        self._index: Optional[int] = 0 if len(catalog) else None

    @property
    def catalog(self) -> StepCatalog:
        return self._catalog

    @property
    def index(self) -> Optional[int]:
        """Catalog position of the current step, None while unresolved."""
        return self._index

    @property
    def is_resolved(self) -> bool:
        return self._index is not None

    @property
    def current(self) -> Optional[StepDefinition]:
        return self._catalog[self._index] if self._index is not None else None

    @property
    def current_id(self) -> Optional[str]:
        step = self.current
        return step.id if step else None

    def go_next(self) -> Optional[str]:
        if self._index is not None:
            self._index = min(self._index + 1, len(self._catalog) - 1)
        return self.current_id

    def go_previous(self) -> Optional[str]:
        if self._index is not None:
            self._index = max(self._index - 1, 0)
        return self.current_id

    def go_to(self, step_id: str) -> str:
        """Jump to a step regardless of the active filter."""
        self._index = self._catalog.index_of(step_id)
        return step_id

    def rewind(self) -> Optional[str]:
        self._index = 0 if len(self._catalog) else None
        return self.current_id

    def reconcile(self, view: FilterView) -> Optional[str]:
        """
        Re-anchor against a filter view. A cursor on a step that is still
        visible stays put; otherwise it moves to the first visible step, or
        becomes unresolved when nothing is visible.
        """
        if self.current_id is not None and self.current_id in view:
            return self.current_id
        first = view.first()
        self._index = self._catalog.index_of(first.id) if first else None
        logger.debug(f"Cursor reconciled to {self.current_id}")
        return self.current_id


def mark_done(store: StatusStore, cursor: NavigationCursor, step_id: str, done: bool = True) -> Optional[str]:
    """
    Check or un-check a step.

    Checking completes the step and moves the cursor to the nearest following
    step that is not completed (no move if there is none). Un-checking returns
    the step to pending and leaves the cursor where it is.
    """
    catalog = cursor.catalog
    position = catalog.index_of(step_id)
    if not done:
        store.set_status(step_id, Status.PENDING)
        return cursor.current_id

    store.set_status(step_id, Status.COMPLETED)
    for follower in catalog.steps[position + 1:]:
        if not store.is_completed(follower.id):
            return cursor.go_to(follower.id)
    return cursor.current_id


def skip(store: StatusStore, cursor: NavigationCursor, step_id: str) -> Optional[str]:
    """Defer a step and move exactly one position forward (clamped at the end)."""
    catalog = cursor.catalog
    position = catalog.index_of(step_id)
    store.set_status(step_id, Status.SKIPPED)
    return cursor.go_to(catalog[min(position + 1, len(catalog) - 1)].id)
