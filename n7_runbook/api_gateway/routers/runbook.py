"""
Runbook Router.
Presentation-layer boundary: every endpoint maps onto exactly one operator
intent (or a read of the current snapshot). Responses always carry a fresh
snapshot so the UI can re-render without a second round-trip.
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from ...audit_exporter.service import DirectoryExportSink, render_audit
from ...schemas.step import StepDefinition
from ...session.service import RunbookSession
from ..dependencies import get_export_sink, get_session

router = APIRouter(tags=["Runbook"])
logger = logging.getLogger("n7-runbook.runbook-router")


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class QueryUpdate(BaseModel):
    query: str = ""

class DoneUpdate(BaseModel):
    done: bool = True

class MetadataUpdate(BaseModel):
    """Partial metadata edit; keys are field names (accountId or account_id)."""
    fields: Dict[str, Any]


def _snapshot(session: RunbookSession) -> dict:
    return session.snapshot().model_dump(mode="json", by_alias=True)


@router.get("/catalog", response_model=List[StepDefinition])
async def get_catalog(session: RunbookSession = Depends(get_session)):
    return list(session.catalog)


@router.get("/state")
async def get_state(session: RunbookSession = Depends(get_session)):
    return _snapshot(session)


@router.put("/query")
async def set_query(body: QueryUpdate, session: RunbookSession = Depends(get_session)):
    session.set_query(body.query)
    return _snapshot(session)


@router.post("/steps/{step_id}/select")
async def select_step(step_id: str, session: RunbookSession = Depends(get_session)):
    session.select_step(step_id)
    return _snapshot(session)


@router.post("/steps/{step_id}/done")
async def mark_done(step_id: str, body: DoneUpdate, session: RunbookSession = Depends(get_session)):
    session.mark_done(step_id, body.done)
    return _snapshot(session)


@router.post("/steps/{step_id}/skip")
async def skip_step(step_id: str, session: RunbookSession = Depends(get_session)):
    session.skip(step_id)
    return _snapshot(session)


@router.post("/cursor/next")
async def go_next(session: RunbookSession = Depends(get_session)):
    session.go_next()
    return _snapshot(session)


@router.post("/cursor/previous")
async def go_previous(session: RunbookSession = Depends(get_session)):
    session.go_previous()
    return _snapshot(session)


@router.patch("/metadata")
async def edit_metadata(body: MetadataUpdate, session: RunbookSession = Depends(get_session)):
    session.update_metadata(body.fields)
    return _snapshot(session)


@router.post("/reset")
async def reset(session: RunbookSession = Depends(get_session)):
    session.reset()
    return _snapshot(session)


@router.get("/audit")
async def download_audit(session: RunbookSession = Depends(get_session)):
    """Return the audit report as a JSON attachment named after the incident."""
    return Response(
        content=render_audit(session.export_audit()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{session.export_filename()}"'},
    )


@router.post("/audit/export")
async def export_audit(
    session: RunbookSession = Depends(get_session),
    sink: DirectoryExportSink = Depends(get_export_sink),
):
    """Write the audit report into the configured export directory."""
    path = session.export_to(sink)
    return {"status": "exported", "path": str(path), "filename": path.name}
