"""
Runbook Session.

The intent-handling layer between the presentation layer and the core. It owns
the status store, navigation cursor, search query and incident metadata for a
single local operator. Every intent mutates state synchronously and then
notifies subscribers, which pull a fresh snapshot() to re-render.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from ..audit_exporter.service import DirectoryExportSink, export_audit, suggested_filename
from ..catalog.catalog import StepCatalog, load_catalog
from ..config import Settings
from ..errors import InvalidMetadataError
from ..filter.projection import FilterView
from ..navigation.cursor import NavigationCursor, mark_done, skip
from ..persistence.factory import build_store
from ..progress.aggregator import ProgressSummary, percent_complete, progress_summary
from ..schemas.audit import AuditReport
from ..schemas.incident import IncidentMetadata
from ..schemas.step import StepDefinition, StepState
from ..status_store.service import Clock, StatusStore, utc_now

logger = logging.getLogger("n7-runbook.session")

Listener = Callable[[], None]


class SessionSnapshot(BaseModel):
    """Everything the presentation layer needs to render one frame."""
    model_config = ConfigDict(frozen=True)

    query: str
    filtered: bool
    visible_ids: List[str]
    current: Optional[StepDefinition]
    current_state: Optional[StepState]
    statuses: List[StepState]
    progress: int
    summary: ProgressSummary
    metadata: IncidentMetadata


class RunbookSession:
    def __init__(self, catalog: StepCatalog, store: StatusStore, clock: Clock = utc_now):
        self.catalog = catalog
        self.store = store
        self.cursor = NavigationCursor(catalog)
        self.metadata = IncidentMetadata()
        self._query = ""
        self._clock = clock
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Session listener {listener!r} failed: {e}", exc_info=True)

    @property
    def query(self) -> str:
        return self._query

    def visible(self) -> FilterView:
        return FilterView(self.catalog, self._query)

    def snapshot(self) -> SessionSnapshot:
        statuses = self.store.statuses()
        current = self.cursor.current
        view = self.visible()
        return SessionSnapshot(
            query=self._query,
            filtered=view.is_filtered,
            visible_ids=list(view.ids()),
            current=current,
            current_state=self.store.get(current.id) if current else None,
            statuses=list(statuses),
            progress=percent_complete(statuses),
            summary=progress_summary(self.catalog, statuses),
            metadata=self.metadata,
        )

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def set_query(self, text: str):
        self._query = text
        self.cursor.reconcile(self.visible())
        self._notify()

    def select_step(self, step_id: str):
        self.cursor.go_to(step_id)
        self._notify()

    def _follow_filter(self, before: Optional[int]):
        # A cursor that moved must land on a visible step; select_step is exempt.
        if self.cursor.index != before:
            self.cursor.reconcile(self.visible())

    def mark_done(self, step_id: str, done: bool = True):
        before = self.cursor.index
        mark_done(self.store, self.cursor, step_id, done)
        self._follow_filter(before)
        self._notify()

    def skip(self, step_id: str):
        before = self.cursor.index
        skip(self.store, self.cursor, step_id)
        self._follow_filter(before)
        self._notify()

    def go_next(self):
        before = self.cursor.index
        self.cursor.go_next()
        self._follow_filter(before)
        self._notify()

    def go_previous(self):
        before = self.cursor.index
        self.cursor.go_previous()
        self._follow_filter(before)
        self._notify()

    def edit_metadata(self, field: str, value: Any):
        """Update one metadata field, by attribute name (account_id) or export name (accountId)."""
        self.update_metadata({field: value})

    def update_metadata(self, changes: Dict[str, Any]):
        """
        Apply several metadata edits as one intent.

        The merged record is validated once; on any unknown field or invalid
        value nothing is applied and InvalidMetadataError is raised.
        """
        fields = IncidentMetadata.model_fields
        aliases = {info.alias: name for name, info in fields.items() if info.alias}
        merged = self.metadata.model_dump()
        for field, value in changes.items():
            name = aliases.get(field, field)
            if name not in fields:
                raise InvalidMetadataError(f"Unknown incident metadata field '{field}'")
            merged[name] = value
        try:
            self.metadata = IncidentMetadata.model_validate(merged)
        except ValidationError as e:
            raise InvalidMetadataError(f"Invalid incident metadata {sorted(changes)}: {e}") from e
        self._notify()

    def reset(self):
        """Clear all statuses and return to the first (visible) step. Metadata is kept."""
        self.store.reset()
        self.cursor.rewind()
        self.cursor.reconcile(self.visible())
        self._notify()

    def export_audit(self) -> AuditReport:
        return export_audit(self.catalog, self.store.statuses(), self.metadata, self._clock())

    def export_filename(self) -> str:
        return suggested_filename(self.metadata.name)

    def export_to(self, sink: DirectoryExportSink):
        """Hand the current audit report to an export sink. Sink failures leave state untouched."""
        return sink.write(self.export_audit(), self.export_filename())


def open_session(settings: Settings, clock: Clock = utc_now) -> RunbookSession:
    """Build catalog, storage and status store from settings and load persisted progress."""
    catalog = load_catalog(settings.CATALOG_PATH)
    store = StatusStore(build_store(settings), settings.STORAGE_KEY, clock=clock)
    store.load(catalog.ids)
    return RunbookSession(catalog, store, clock=clock)
