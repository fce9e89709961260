from typing import Optional

from fastapi import HTTPException

from ..audit_exporter.service import DirectoryExportSink
from ..config import settings
from ..session.service import RunbookSession

# Module-level references set by main.py once the session has been opened.
_session_ref: Optional[RunbookSession] = None
_sink_ref: Optional[DirectoryExportSink] = None


def register_session(session: Optional[RunbookSession], sink: Optional[DirectoryExportSink] = None) -> None:
    """Called from main.py to hand the live session to the API routers."""
    global _session_ref, _sink_ref
    _session_ref = session
    _sink_ref = sink


def get_session() -> RunbookSession:
    if _session_ref is None:
        raise HTTPException(status_code=503, detail="Runbook session not initialised")
    return _session_ref


def get_export_sink() -> DirectoryExportSink:
    return _sink_ref or DirectoryExportSink(settings.EXPORT_DIR)


def session_registered() -> bool:
    return _session_ref is not None
