from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    """Runbook phases, in the order an incident normally moves through them."""
    PREPARATION = "Preparation"
    TRIAGE = "Triage"
    CONTAINMENT = "Containment"
    FORENSICS = "Forensics"
    ERADICATION = "Eradication"
    RECOVERY = "Recovery"
    HARDENING = "Hardening"
    POST_INCIDENT = "Post-Incident"


class Status(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


# Spellings written by the original browser build of the runbook
_LEGACY_STATUS = {
    "todo": Status.PENDING,
    "done": Status.COMPLETED,
}


class CommandBlock(BaseModel):
    """Example command shown with a step. Never executed by the runbook."""
    model_config = ConfigDict(frozen=True)

    label: Optional[str] = None
    cmd: str


class ReferenceLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    href: str


class StepDefinition(BaseModel):
    """
    One procedural item of the runbook.
    Immutable: the catalog is fixed at process start.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    title: str
    category: Category
    critical: bool = False
    details: str = ""
    commands: Tuple[CommandBlock, ...] = ()
    links: Tuple[ReferenceLink, ...] = ()


class StepState(BaseModel):
    """
    Current status of one step.
    done_at is present if and only if status is completed.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    status: Status = Status.PENDING
    done_at: Optional[datetime] = Field(default=None, alias="doneAt")

    @field_validator("status", mode="before")
    @classmethod
    def map_legacy_status(cls, value: Any):
        if isinstance(value, str) and value in _LEGACY_STATUS:
            return _LEGACY_STATUS[value]
        return value

    @model_validator(mode="before")
    @classmethod
    def drop_stray_timestamp(cls, data: Any):
        # Timestamps only describe completions
        if isinstance(data, dict):
            status = data.get("status")
            if status not in (Status.COMPLETED, Status.COMPLETED.value, "done"):
                data = {k: v for k, v in data.items() if k not in ("doneAt", "done_at")}
        return data

    @model_validator(mode="after")
    def check_timestamp(self):
        if self.status is Status.COMPLETED and self.done_at is None:
            raise ValueError(f"completed step '{self.id}' has no completion timestamp")
        return self

    @classmethod
    def pending(cls, step_id: str) -> "StepState":
        return cls(id=step_id)
