"""
Audit Exporter.

Builds the exportable audit record of an incident: metadata, generation time
and every step's status in catalog order. The report's aliased field names
(meta, generatedAt, doneAt, accountId, ...) are consumed by downstream audit
tooling and must stay stable.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Union

from ..catalog.catalog import StepCatalog
from ..errors import ExportError
from ..schemas.audit import AuditReport, AuditStep
from ..schemas.incident import IncidentMetadata
from ..schemas.step import StepState

logger = logging.getLogger("n7-runbook.audit-exporter")

_SLUG_SEPARATOR_RUNS = re.compile(r"[^A-Za-z0-9]+")


def export_audit(
    catalog: StepCatalog,
    states: Iterable[StepState],
    metadata: IncidentMetadata,
    now: datetime,
) -> AuditReport:
    """Project catalog, statuses and metadata into an immutable AuditReport. No side effects."""
    by_id = {s.id: s for s in states}
    steps = []
    for step in catalog:
        state = by_id.get(step.id) or StepState.pending(step.id)
        steps.append(AuditStep(
            id=step.id,
            title=step.title,
            category=step.category,
            status=state.status,
            done_at=state.done_at,
        ))
    return AuditReport(meta=metadata, generated_at=now, steps=tuple(steps))


def suggested_filename(incident_name: str) -> str:
    """incident-audit-<slug>.json, with every run of non-alphanumerics collapsed to '-'."""
    slug = _SLUG_SEPARATOR_RUNS.sub("-", incident_name).strip("-") or "untitled"
    return f"incident-audit-{slug}.json"


def render_audit(report: AuditReport) -> bytes:
    return report.model_dump_json(by_alias=True, indent=2).encode("utf-8")


class DirectoryExportSink:
    """
    Materializes audit reports as JSON files in a directory.
    Existing files with the same name are overwritten.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def write(self, report: AuditReport, filename: str) -> Path:
        target = self.directory / Path(filename).name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(render_audit(report))
        except OSError as e:
            raise ExportError(f"Could not write audit report to {target}: {e}") from e
        logger.info(f"Audit report exported to {target}")
        return target
