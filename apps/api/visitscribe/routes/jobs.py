"""Job polling and listing routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from starlette.concurrency import run_in_threadpool

from visitscribe.repositories.records import PipelineRecords
from visitscribe.routes.dependencies import get_poll_service, get_records
from visitscribe.schemas.error import UpstreamErrorResponse
from visitscribe.schemas.job import JobListItem, JobListResponse, PollResponse
from visitscribe.services.polling import PollService

router = APIRouter(tags=["Jobs"])


@router.get(
    "/jobs/{jobId}",
    response_model=PollResponse,
    response_model_exclude_none=True,
    responses={500: {"model": UpstreamErrorResponse}, 502: {"model": UpstreamErrorResponse}},
)
async def poll_job(
    job_id: Annotated[str, Path(alias="jobId")],
    service: Annotated[PollService, Depends(get_poll_service)],
) -> PollResponse:
    result = await run_in_threadpool(service.poll, job_id)
    return PollResponse(status=result.status, transcript=result.transcript, summary=result.summary)


@router.get("/jobs", response_model=JobListResponse, response_model_by_alias=True)
async def list_jobs(records: Annotated[PipelineRecords, Depends(get_records)]) -> JobListResponse:
    items = await run_in_threadpool(records.list_job_records)
    return JobListResponse(
        jobs=[
            JobListItem(
                job_id=item.job_id,
                session_id=item.session_id,
                finalized_at=item.finalized_at,
                patient_id=item.context.get("patientId"),
                patient_name=item.context.get("patientName"),
                facility_id=item.context.get("facilityId"),
                facility_name=item.context.get("facilityName"),
            )
            for item in items
            if item.job_id
        ]
    )
