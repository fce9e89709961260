from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    SEV1 = "SEV-1"
    SEV2 = "SEV-2"
    SEV3 = "SEV-3"
    SEV4 = "SEV-4"
    TBD = "TBD"  # not yet determined


class IncidentMetadata(BaseModel):
    """
    Free-form incident details captured into the audit export.
    Session-scoped: resets to these defaults on restart.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = "Untitled Incident"
    severity: Severity = Severity.TBD
    account_id: str = Field(default="", alias="accountId")
    region: str = ""
    commander: str = ""
    scribe: str = ""
