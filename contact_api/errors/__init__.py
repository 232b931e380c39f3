from contact_api.errors.base import BaseAppError, create_exception_handler, error_response
from contact_api.errors.contact import (
    ALLOWED_METHODS,
    MethodNotAllowedError,
    RateLimitedError,
    SubmissionValidationError,
    contact_exception_handler,
    method_not_allowed_handler,
)
from contact_api.errors.email import (
    ConfigurationError,
    EmailDeliveryError,
    EmailServiceError,
    NetworkError,
    SendingError,
    email_client_exception_handler,
)
from contact_api.errors.security import (
    ReportUnavailableError,
    UnauthorizedError,
    security_exception_handler,
)

__all__ = [
    "ALLOWED_METHODS",
    "BaseAppError",
    "ConfigurationError",
    "EmailDeliveryError",
    "EmailServiceError",
    "MethodNotAllowedError",
    "NetworkError",
    "RateLimitedError",
    "ReportUnavailableError",
    "SendingError",
    "SubmissionValidationError",
    "UnauthorizedError",
    "contact_exception_handler",
    "create_exception_handler",
    "email_client_exception_handler",
    "error_response",
    "method_not_allowed_handler",
    "security_exception_handler",
]
