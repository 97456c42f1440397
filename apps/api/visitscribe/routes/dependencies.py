"""Dependency wiring for routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from visitscribe.adapters.factory import Adapters
from visitscribe.core.config import Settings
from visitscribe.repositories.records import PipelineRecords
from visitscribe.services.delivery import DeliveryService
from visitscribe.services.finalize import FinalizeService
from visitscribe.services.polling import PollService
from visitscribe.services.summarization import SummarizationService
from visitscribe.services.uploads import UploadService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_adapters(request: Request) -> Adapters:
    return request.app.state.adapters


def get_records(
    adapters: Annotated[Adapters, Depends(get_adapters)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> PipelineRecords:
    return PipelineRecords(adapters.store, cache_dir=settings.data_dir)


def get_upload_service(
    adapters: Annotated[Adapters, Depends(get_adapters)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UploadService:
    return UploadService(adapters.store, settings)


def get_finalize_service(
    records: Annotated[PipelineRecords, Depends(get_records)],
    adapters: Annotated[Adapters, Depends(get_adapters)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> FinalizeService:
    return FinalizeService(records, adapters.transcoder, adapters.transcriber, settings)


def get_poll_service(
    records: Annotated[PipelineRecords, Depends(get_records)],
    adapters: Annotated[Adapters, Depends(get_adapters)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> PollService:
    return PollService(
        records,
        adapters.transcriber,
        SummarizationService(records, adapters.generator, settings),
        DeliveryService(records, adapters.messenger),
        settings,
    )
