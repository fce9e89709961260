import json

import httpx
import pytest
from fastapi.testclient import TestClient

from n7_runbook.api_gateway import dependencies
from n7_runbook.api_gateway.dependencies import register_session
from n7_runbook.api_gateway.service import app
from n7_runbook.audit_exporter.service import DirectoryExportSink

BASE = "/api/v1/runbook"


@pytest.fixture
def client(session, tmp_path):
    register_session(session, DirectoryExportSink(tmp_path / "exports"))
    yield TestClient(app)
    register_session(None, None)


def test_health_reports_session(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_health_before_session_registered():
    dependencies.register_session(None, None)
    with TestClient(app) as c:
        assert c.get("/health").json() == {"status": "starting"}
        assert c.get(f"{BASE}/state").status_code == 503


def test_get_catalog(client):
    steps = client.get(f"{BASE}/catalog").json()

    assert [s["id"] for s in steps] == ["declare-incident", "rotate-keys", "reporting"]
    assert steps[1]["commands"][0]["cmd"].startswith("aws iam")


def test_get_state(client):
    state = client.get(f"{BASE}/state").json()

    assert state["current"]["id"] == "declare-incident"
    assert state["progress"] == 0
    assert state["metadata"]["accountId"] == ""
    assert state["metadata"]["severity"] == "TBD"


def test_mark_done_and_skip_flow(client):
    state = client.post(f"{BASE}/steps/declare-incident/done", json={"done": True}).json()
    assert state["current"]["id"] == "rotate-keys"
    assert state["statuses"][0]["status"] == "completed"
    assert state["statuses"][0]["doneAt"] is not None

    state = client.post(f"{BASE}/steps/rotate-keys/skip").json()
    assert state["current"]["id"] == "reporting"
    assert state["progress"] == 33

    state = client.post(f"{BASE}/steps/declare-incident/done", json={"done": False}).json()
    assert state["statuses"][0] == {"id": "declare-incident", "status": "pending", "doneAt": None}
    assert state["current"]["id"] == "reporting"


def test_cursor_navigation(client):
    assert client.post(f"{BASE}/cursor/next").json()["current"]["id"] == "rotate-keys"
    assert client.post(f"{BASE}/cursor/previous").json()["current"]["id"] == "declare-incident"
    assert client.post(f"{BASE}/steps/reporting/select").json()["current"]["id"] == "reporting"


def test_query_filters_and_reconciles(client):
    state = client.put(f"{BASE}/query", json={"query": "rotate"}).json()

    assert state["visible_ids"] == ["rotate-keys"]
    assert state["current"]["id"] == "rotate-keys"


def test_unknown_step_is_404(client):
    resp = client.post(f"{BASE}/steps/nope/done", json={"done": True})

    assert resp.status_code == 404
    assert "nope" in resp.json()["detail"]


def test_metadata_edit(client):
    resp = client.patch(f"{BASE}/metadata", json={"fields": {"name": "SEV1 keys", "severity": "SEV-1", "accountId": "42"}})

    assert resp.status_code == 200
    meta = resp.json()["metadata"]
    assert meta == {
        "name": "SEV1 keys",
        "severity": "SEV-1",
        "accountId": "42",
        "region": "",
        "commander": "",
        "scribe": "",
    }


def test_invalid_metadata_is_422(client):
    resp = client.patch(f"{BASE}/metadata", json={"fields": {"severity": "SEV-0"}})

    assert resp.status_code == 422


def test_rejected_metadata_patch_changes_nothing(client):
    resp = client.patch(f"{BASE}/metadata", json={"fields": {"name": "Leak", "severity": "SEV-9"}})

    assert resp.status_code == 422
    assert client.get(f"{BASE}/state").json()["metadata"]["name"] == "Untitled Incident"


def test_mark_done_under_filter_keeps_cursor_visible(client):
    client.put(f"{BASE}/query", json={"query": "rotate"})

    state = client.post(f"{BASE}/steps/rotate-keys/done", json={"done": True}).json()

    assert state["filtered"] is True
    assert state["current"]["id"] in state["visible_ids"]


def test_reset(client):
    client.post(f"{BASE}/steps/declare-incident/done", json={"done": True})

    state = client.post(f"{BASE}/reset").json()

    assert state["progress"] == 0
    assert state["current"]["id"] == "declare-incident"


def test_download_audit(client):
    client.patch(f"{BASE}/metadata", json={"fields": {"name": "Rehearsal 7"}})

    resp = client.get(f"{BASE}/audit")

    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == 'attachment; filename="incident-audit-Rehearsal-7.json"'
    report = json.loads(resp.content)
    assert report["meta"]["name"] == "Rehearsal 7"
    assert [s["status"] for s in report["steps"]] == ["pending"] * 3


def test_export_audit_to_directory(client, tmp_path):
    resp = client.post(f"{BASE}/audit/export")

    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"] == "incident-audit-Untitled-Incident.json"
    assert (tmp_path / "exports" / body["filename"]).exists()


def test_export_failure_is_500(client, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory")
    register_session(dependencies.get_session(), DirectoryExportSink(blocker))

    resp = client.post(f"{BASE}/audit/export")

    assert resp.status_code == 500
    assert client.get(f"{BASE}/state").status_code == 200


@pytest.mark.asyncio
async def test_async_client_round_trip(session):
    register_session(session)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.post(f"{BASE}/steps/declare-incident/done", json={"done": True})
        assert resp.status_code == 200
        assert resp.json()["current"]["id"] == "rotate-keys"
    register_session(None, None)
