"""FastAPI boundary for the execution service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..exceptions import ExecutionError
from ..execution.toolchains import toolchain_report
from ..runner import MISSING_FIELDS_MESSAGE, Dispatcher, build_request
from ..settings import ExecutorSettings, load_settings
from .deps import BearerTokenAuth
from .schemas import ExecuteRequest, ExecuteResponse, HealthResponse, ToolchainResponse

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"output": "", "error": message, "executionTime": 0},
    )


def create_app(
    settings: ExecutorSettings | None = None,
    dispatcher: Dispatcher | None = None,
) -> FastAPI:
    """Build the HTTP app around one dispatcher.

    Example:
        ```python
        app = create_app(ExecutorSettings(api_tokens=["secret"]))
        ```
    """
    if dispatcher is None:
        dispatcher = Dispatcher(settings or load_settings())
    settings = dispatcher.settings
    require_collaborator = BearerTokenAuth(settings.api_tokens)

    app = FastAPI(title="codebox", version=__version__)
    app.state.dispatcher = dispatcher
    router = APIRouter(prefix=settings.api_prefix)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = _STATUS_MESSAGES.get(exc.status_code, str(exc.detail))
        return _error_response(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS_MESSAGE)

    @app.exception_handler(ExecutionError)
    async def execution_failed(request: Request, exc: ExecutionError) -> JSONResponse:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal server error")

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Code execution error: %s", exc, exc_info=exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @router.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse()

    @router.get("/languages", response_model=list[ToolchainResponse])
    def languages() -> list[ToolchainResponse]:
        return [
            ToolchainResponse(
                language=info.language.value,
                label=info.language.label,
                extension=info.extension,
                commands=list(info.commands),
                missing=list(info.missing),
                available=info.available,
            )
            for info in toolchain_report(settings)
        ]

    # Sync handler: FastAPI runs it in the threadpool so submissions execute concurrently.
    @router.post(
        "/execute",
        response_model=ExecuteResponse,
        response_model_exclude_none=True,
        dependencies=[Depends(require_collaborator)],
    )
    def execute(payload: ExecuteRequest) -> ExecuteResponse | JSONResponse:
        try:
            request = build_request(payload.code, payload.language, payload.input)
        except ValueError as exc:
            return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
        result = dispatcher.dispatch(request)
        return ExecuteResponse(
            output=result.output,
            error=result.error,
            execution_time=result.execution_time_ms,
        )

    app.include_router(router)
    return app
