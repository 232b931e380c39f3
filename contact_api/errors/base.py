from collections.abc import Awaitable, Callable, Mapping
from logging import Logger

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from contact_api.utils.helpers import client_identifier


class BaseAppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.headers = dict(headers or {})

    def __str__(self) -> str:
        return self.detail


def error_response(
    detail: str,
    status_code: int,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Render the ``{"error": ...}`` envelope every failure uses."""
    return JSONResponse(content={"error": detail}, status_code=status_code, headers=headers)


def create_exception_handler(
    logger: Logger,
) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    """
    Create a standardized exception handler for the application.

    Only ``detail`` and ``headers`` of the exception reach the client; any
    other attribute stays server side.

    Args:
        logger: Logger instance to use for logging exceptions.

    Returns:
        A callable exception handler.
    """

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
        detail = getattr(exc, "detail", "Internal Server Error")
        headers = getattr(exc, "headers", None)

        logger.warning(
            f"{detail} for ip: {client_identifier(request)} for endpoint {request.url.path}",
        )
        return error_response(detail, status_code, headers)

    return handler
