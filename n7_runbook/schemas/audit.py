from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .incident import IncidentMetadata
from .step import Category, Status


class AuditStep(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    category: Category
    status: Status
    done_at: Optional[datetime] = Field(default=None, alias="doneAt")


class AuditReport(BaseModel):
    """
    Exportable snapshot of incident metadata and every step's status.
    Field aliases are the external format consumed by downstream audit tooling.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    meta: IncidentMetadata
    generated_at: datetime = Field(alias="generatedAt")
    steps: Tuple[AuditStep, ...]
