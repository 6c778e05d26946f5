"""
Shared router-level error handling helpers.
Decorators for mapping alerting exceptions to HTTP status codes consistently across route handlers.


Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar
import logging

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.alerting.errors import (
    AlertingError,
    DecodeError,
    InvalidPayload,
    SilenceCreateFailed,
    SilenceDeleteFailed,
    SilenceIDNotFound,
    SourceUnavailable,
    StorageError,
)


F = TypeVar("F", bound=Callable[..., Awaitable[Any]])
logger = logging.getLogger(__name__)


def handle_route_errors(
    *,
    bad_request_exceptions: tuple[type[Exception], ...] = (InvalidPayload, SilenceIDNotFound),
    server_error_exceptions: tuple[type[Exception], ...] = (
        SourceUnavailable,
        StorageError,
        DecodeError,
        SilenceCreateFailed,
        SilenceDeleteFailed,
    ),
    server_error_detail: str | None = None,
    internal_detail: str | None = "Internal server error",
) -> Callable[[F], F]:

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except bad_request_exceptions as exc:
                detail = str(exc) or "Invalid request"
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc
            except server_error_exceptions as exc:
                logger.error("%s failed: %s", func.__name__, exc)
                detail = f"{server_error_detail}: {exc}" if server_error_detail else str(exc)
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc
            except Exception as exc:
                logger.exception("Unhandled exception in route %s: %s", func.__name__, exc)
                if internal_detail:
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail=internal_detail,
                    ) from exc
                raise

        return wrapper

    return decorator


def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def alerting_exception_handler(
    request: Request,
    exc: AlertingError,
) -> JSONResponse:
    code = (
        status.HTTP_400_BAD_REQUEST
        if isinstance(exc, (InvalidPayload, SilenceIDNotFound))
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    logger.error("Unhandled alerting error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
