from logging import getLogger

from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_503_SERVICE_UNAVAILABLE

from contact_api.configs import file_logger
from contact_api.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class UnauthorizedError(BaseAppError):
    """Missing or wrong bearer token on an admin endpoint."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            detail=detail,
            status_code=HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ReportUnavailableError(BaseAppError):
    """Raised when no admin token is configured, so nobody may read reports."""

    def __init__(self, detail: str = "Security reporting is not configured") -> None:
        super().__init__(detail=detail, status_code=HTTP_503_SERVICE_UNAVAILABLE)


security_exception_handler = create_exception_handler(logger)
