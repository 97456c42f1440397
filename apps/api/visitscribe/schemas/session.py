"""Recording session API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SignUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    user_id: str | None = Field(default=None, alias="userId")
    seq: int | None = None
    content_type: str | None = Field(default=None, alias="contentType")


class SignUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    signed_url: str = Field(alias="signedUrl")
    object_path: str = Field(alias="objectPath")


class FinalizeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    user_id: str | None = Field(default=None, alias="userId")
    patient_id: str | None = Field(default=None, alias="patientId")
    patient_name: str | None = Field(default=None, alias="patientName")
    facility_id: str | None = Field(default=None, alias="facilityId")
    facility_name: str | None = Field(default=None, alias="facilityName")

    def context(self) -> dict[str, str]:
        """Opaque visit labels carried alongside the job record."""
        labels = {
            "patientId": self.patient_id,
            "patientName": self.patient_name,
            "facilityId": self.facility_id,
            "facilityName": self.facility_name,
        }
        return {key: value for key, value in labels.items() if value is not None}


class FinalizeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    job_id: str = Field(alias="jobId")
    replayed: bool = False
