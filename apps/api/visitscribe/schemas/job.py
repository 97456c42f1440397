"""Job API schemas and the persisted job metadata record."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PollStatus(str, Enum):
    RUNNING = "RUNNING"
    DONE = "DONE"


class JobMetadata(BaseModel):
    """Create-once mapping between a session and its transcription job.

    Serialized with camelCase keys; the layout is shared by every instance.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str = Field(alias="sessionId")
    user_id: str | None = Field(default=None, alias="userId")
    audio_uri: str | None = Field(default=None, alias="audioUri")
    job_id: str | None = Field(default=None, alias="jobId")
    context: dict[str, Any] = Field(default_factory=dict)
    finalized_at: datetime | None = Field(default=None, alias="finalizedAt")

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True, indent=2).encode("utf-8")


class PollResponse(BaseModel):
    ok: bool = True
    status: PollStatus
    transcript: str | None = None
    summary: dict[str, Any] | None = None


class JobListItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    session_id: str = Field(alias="sessionId")
    finalized_at: datetime | None = Field(default=None, alias="finalizedAt")
    patient_id: str | None = Field(default=None, alias="patientId")
    patient_name: str | None = Field(default=None, alias="patientName")
    facility_id: str | None = Field(default=None, alias="facilityId")
    facility_name: str | None = Field(default=None, alias="facilityName")


class JobListResponse(BaseModel):
    ok: bool = True
    jobs: list[JobListItem]
