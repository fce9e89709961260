from datetime import datetime, timedelta, timezone

import pytest

from n7_runbook.catalog.catalog import StepCatalog
from n7_runbook.persistence.memory_store import InMemoryKeyValueStore
from n7_runbook.schemas.step import Category, StepDefinition
from n7_runbook.session.service import RunbookSession
from n7_runbook.status_store.service import StatusStore

STORAGE_KEY = "incident-rescue-progress-v1"
T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Deterministic clock; each call returns the next minute."""

    def __init__(self, start: datetime = T0):
        self.now = start
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.now + timedelta(minutes=self.calls)
        self.calls += 1
        return value


@pytest.fixture
def catalog():
    return StepCatalog([
        StepDefinition(
            id="declare-incident",
            title="Declare Incident, Assign Roles",
            category=Category.PREPARATION,
            critical=True,
            details="Open a war room and start the timeline.",
        ),
        StepDefinition(
            id="rotate-keys",
            title="Rotate IAM Access Keys",
            category=Category.CONTAINMENT,
            critical=True,
            details="Deactivate compromised credentials.",
            commands=[{"cmd": "aws iam update-access-key --status Inactive"}],
        ),
        StepDefinition(
            id="reporting",
            title="Post-Incident Report",
            category=Category.POST_INCIDENT,
            details="Publish a blameless review with action items.",
        ),
    ])


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(catalog, storage, clock):
    s = StatusStore(storage, STORAGE_KEY, clock=clock)
    s.load(catalog.ids)
    return s


@pytest.fixture
def session(catalog, store, clock):
    return RunbookSession(catalog, store, clock=clock)
