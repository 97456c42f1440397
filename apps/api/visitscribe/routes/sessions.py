"""Recording session routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from visitscribe.routes.dependencies import get_finalize_service, get_upload_service
from visitscribe.schemas.error import ErrorResponse, UpstreamErrorResponse, ValidationErrorResponse
from visitscribe.schemas.session import (
    FinalizeRequest,
    FinalizeResponse,
    SignUploadRequest,
    SignUploadResponse,
)
from visitscribe.services.finalize import FinalizeService
from visitscribe.services.uploads import UploadService

router = APIRouter(tags=["Sessions"])


@router.post(
    "/uploads/sign",
    response_model=SignUploadResponse,
    response_model_by_alias=True,
    responses={400: {"model": ValidationErrorResponse}},
)
async def sign_upload(
    payload: SignUploadRequest,
    service: Annotated[UploadService, Depends(get_upload_service)],
) -> SignUploadResponse:
    signed = await run_in_threadpool(
        service.sign_chunk_upload,
        session_id=payload.session_id,
        user_id=payload.user_id,
        seq=payload.seq,
        content_type=payload.content_type,
    )
    return SignUploadResponse(signed_url=signed.signed_url, object_path=signed.object_path)


@router.post(
    "/finalize",
    response_model=FinalizeResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": UpstreamErrorResponse},
    },
)
async def finalize_session(
    payload: FinalizeRequest,
    service: Annotated[FinalizeService, Depends(get_finalize_service)],
) -> FinalizeResponse:
    result = await run_in_threadpool(
        service.finalize,
        session_id=payload.session_id,
        user_id=payload.user_id,
        context=payload.context(),
    )
    return FinalizeResponse(job_id=result.job_id, replayed=result.replayed)
