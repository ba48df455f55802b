from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from app.core.errors import AppError, ValidationError
from app.models.base import utc_now
from app.schemas.common import ErrorBody, ErrorEnvelope

SYSTEM_ERROR_MESSAGE = 'An unexpected error occurred. Please try again later.'


def _trace_id(request: Request) -> Optional[str]:
    return getattr(request.state, 'trace_id', None)


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    error_type: str,
    errors: Optional[dict[str, list[str]]] = None,
) -> JSONResponse:
    envelope = ErrorEnvelope(
        message=message,
        error=ErrorBody(code=code, type=error_type),
        errors=errors,
        trace_id=_trace_id(request),
        timestamp=utc_now(),
    )
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode='json', exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.warning(
            '{} {} failed: {} [{}] {} field={}',
            request.method,
            request.url.path,
            exc.error_code,
            exc.kind.value,
            exc.message,
            exc.field,
        )
        errors = None
        if isinstance(exc, ValidationError) and exc.field and exc.public_message is None:
            errors = {exc.field: [exc.message]}
        return _error_response(
            request,
            exc.status_code,
            exc.safe_message,
            exc.error_code,
            exc.error_type,
            errors,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors: dict[str, list[str]] = {}
        for item in exc.errors():
            field = str(item.get('loc', ('body',))[-1]).lower()
            errors.setdefault(field, []).append(item.get('msg', 'invalid value'))
        logger.warning('{} {} rejected: {}', request.method, request.url.path, errors)
        return _error_response(
            request,
            400,
            'One or more validation errors occurred.',
            ValidationError.error_code,
            'ValidationError',
            errors,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.opt(exception=exc).error('{} {} crashed', request.method, request.url.path)
        return _error_response(request, 500, SYSTEM_ERROR_MESSAGE, 'SYSTEM_ERROR', type(exc).__name__)
