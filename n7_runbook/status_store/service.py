"""
Status Store.

Owns the per-step status (pending / completed / skipped) and completion
timestamp. Exactly one StepState exists for every catalog identity at all
times. Every mutation is written through to the persistence collaborator
immediately: one discrete operator action, one durable write.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from ..errors import PersistenceReadError, UnknownStepError
from ..persistence.base import KeyValueStore
from ..schemas.step import Status, StepState

logger = logging.getLogger("n7-runbook.status-store")

DEFAULT_STORAGE_KEY = "incident-rescue-progress-v1"

_STATE_LIST = TypeAdapter(list[StepState])

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def encode_states(states: Iterable[StepState]) -> bytes:
    return _STATE_LIST.dump_json(list(states), by_alias=True, exclude_none=True)


def decode_states(raw: Optional[bytes]) -> list[StepState]:
    """Parse a persisted StatusSet. Raises PersistenceReadError on absent or malformed data."""
    if raw is None:
        raise PersistenceReadError("No persisted progress")
    try:
        return _STATE_LIST.validate_json(raw)
    except (ValidationError, ValueError) as e:
        raise PersistenceReadError(f"Unparsable persisted progress: {e}") from e


class StatusStore:
    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Clock = utc_now,
    ):
        self._storage = storage
        self._key = storage_key
        self._clock = clock
        self._order: Tuple[str, ...] = ()
        self._states: Dict[str, StepState] = {}

    def load(self, catalog_ids: Iterable[str]) -> Tuple[StepState, ...]:
        """
        Read persisted progress and reconcile it against the catalog.

        Missing identities are synthesized as pending, identities no longer in
        the catalog are dropped. Never fails: unreadable progress degrades to
        all-pending.
        """
        self._order = tuple(catalog_ids)
        persisted: Dict[str, StepState] = {}
        try:
            # Later duplicates win
            persisted = {state.id: state for state in decode_states(self._read())}
        except PersistenceReadError as e:
            logger.warning(f"{e}; starting with all steps pending")

        stale = set(persisted) - set(self._order)
        if stale:
            logger.info(f"Discarding progress for {len(stale)} step(s) no longer in the catalog")

        self._states = {
            step_id: persisted.get(step_id) or StepState.pending(step_id)
            for step_id in self._order
        }
        return self.statuses()

    def _read(self) -> Optional[bytes]:
        try:
            return self._storage.read(self._key)
        except Exception as e:
            raise PersistenceReadError(f"Could not read persisted progress: {e}") from e

    def statuses(self) -> Tuple[StepState, ...]:
        """Immutable snapshot of all states in catalog order."""
        return tuple(self._states[step_id] for step_id in self._order)

    def get(self, step_id: str) -> StepState:
        try:
            return self._states[step_id]
        except KeyError:
            raise UnknownStepError(step_id) from None

    def is_completed(self, step_id: str) -> bool:
        return self.get(step_id).status is Status.COMPLETED

    def set_status(self, step_id: str, status: Status) -> StepState:
        """
        Set a step's status. Completing stamps the current instant; any other
        status clears the timestamp.
        """
        if step_id not in self._states:
            raise UnknownStepError(step_id)
        status = Status(status)
        done_at = self._clock() if status is Status.COMPLETED else None
        state = StepState(id=step_id, status=status, done_at=done_at)
        self._states[step_id] = state
        logger.info(f"Step {step_id} -> {status.value}", extra={"step_id": step_id})
        self._persist()
        return state

    def reset(self) -> Tuple[StepState, ...]:
        """Return every step to pending and clear all timestamps."""
        self._states = {step_id: StepState.pending(step_id) for step_id in self._order}
        logger.info("All runbook steps reset to pending")
        self._persist()
        return self.statuses()

    def _persist(self):
        try:
            self._storage.write(self._key, encode_states(self.statuses()))
        except Exception as e:
            # In-memory state stays authoritative for the session
            logger.error(f"Failed to persist runbook progress: {e}", exc_info=True)
