"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from visitscribe import __version__
from visitscribe.adapters.factory import Adapters, build_adapters
from visitscribe.core.config import Settings, get_settings
from visitscribe.errors import ApiError
from visitscribe.routes import jobs_router, sessions_router
from visitscribe.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

_VALIDATION_MESSAGES: dict[tuple[str, str], str] = {
    ("POST", "/api/v1/finalize"): "Invalid finalize payload",
    ("POST", "/api/v1/uploads/sign"): "Invalid upload signing payload",
}


def create_app(settings: Settings | None = None, adapters: Adapters | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="visitscribe API", version=__version__)
    app.state.settings = settings
    app.state.adapters = adapters or build_adapters(settings)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        route = request.scope.get("route")
        route_path = getattr(route, "path", request.url.path)
        message = _VALIDATION_MESSAGES.get((request.method.upper(), route_path))
        if message is not None:
            fields = [".".join(str(part) for part in error.get("loc", ())[1:]) for error in exc.errors()]
            payload = ErrorResponse(code="VALIDATION_ERROR", message=message, details={"fields": fields})
            return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

        return await request_validation_exception_handler(request, exc)

    @app.get("/", tags=["Health"])
    async def health() -> dict[str, bool]:
        return {"ok": True}

    api_prefix = "/api/v1"
    app.include_router(sessions_router, prefix=api_prefix)
    app.include_router(jobs_router, prefix=api_prefix)

    logger.info(
        "app.created storage=%s speech=%s llm=%s push=%s profile=%s",
        settings.storage_provider,
        settings.speech_provider,
        settings.llm_provider,
        settings.push_provider,
        settings.summary_profile,
    )
    return app
