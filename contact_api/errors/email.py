from logging import getLogger

from starlette.status import (
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from contact_api.configs import SEND_FAILURE_ERROR, file_logger
from contact_api.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class EmailServiceError(BaseAppError):
    """Base class for all email service related errors."""

    def __init__(self, detail: str = "Email service error") -> None:
        super().__init__(
            detail=detail,
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )


class ConfigurationError(EmailServiceError):
    """Raised when mail credentials are missing."""

    def __init__(self, detail: str = "Email service configuration error") -> None:
        super().__init__(detail)
        self.status_code = HTTP_503_SERVICE_UNAVAILABLE


class SendingError(EmailServiceError):
    """Raised when the SMTP server refuses the message."""

    def __init__(self, detail: str = "Email service sending error") -> None:
        super().__init__(detail)
        self.status_code = HTTP_502_BAD_GATEWAY


class NetworkError(EmailServiceError):
    """Raised when the SMTP server cannot be reached."""

    def __init__(self, detail: str = "Email service network error") -> None:
        super().__init__(detail)
        self.status_code = HTTP_503_SERVICE_UNAVAILABLE


class EmailDeliveryError(EmailServiceError):
    """
    Client-facing failure of the dispatch step.

    Always carries the generic message; the transport error that caused it
    is chained as ``__cause__`` and logged, never returned.
    """

    def __init__(self, detail: str = SEND_FAILURE_ERROR) -> None:
        super().__init__(detail)


# Create the exception handler using the helper
email_client_exception_handler = create_exception_handler(logger)
