from logging import getLogger

from fastapi import Request, Response
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_429_TOO_MANY_REQUESTS,
)

from contact_api.configs import CONTACT_PATH, RATE_LIMIT_ERROR, file_logger
from contact_api.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))

ALLOWED_METHODS = "POST, OPTIONS"


class SubmissionValidationError(BaseAppError):
    """Missing or malformed contact field. Raised before any I/O."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, status_code=HTTP_400_BAD_REQUEST)


class RateLimitedError(BaseAppError):
    """Raised when a client identifier has used up its window."""

    def __init__(self, retry_after: int | None = None) -> None:
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(
            detail=RATE_LIMIT_ERROR,
            status_code=HTTP_429_TOO_MANY_REQUESTS,
            headers=headers,
        )


class MethodNotAllowedError(BaseAppError):
    """Raised for any method other than POST and OPTIONS on the contact path."""

    def __init__(self, method: str) -> None:
        super().__init__(
            detail=f"Method {method} Not Allowed",
            status_code=HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": ALLOWED_METHODS},
        )


contact_exception_handler = create_exception_handler(logger)


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Answer routing errors on the contact path with the contact 405.

    The router raises a bare 405 for any method no route declares, including
    made-up ones, so the conversion happens here rather than in a route.
    Everything else keeps FastAPI's default rendering.
    """
    if exc.status_code == HTTP_405_METHOD_NOT_ALLOWED and request.url.path == CONTACT_PATH:
        return await contact_exception_handler(request, MethodNotAllowedError(request.method))
    return await http_exception_handler(request, exc)
