from contact_api.schemas.contact import (
    ContactResponse,
    ContactSubmission,
    ErrorResponse,
    SanitizedSubmission,
)
from contact_api.schemas.email import MailMessage
from contact_api.schemas.health import HealthCheckResponse
from contact_api.schemas.security import (
    OffendingIp,
    SecurityEvent,
    SecurityEventType,
    SecurityReport,
    Severity,
)

__all__ = [
    "ContactResponse",
    "ContactSubmission",
    "ErrorResponse",
    "HealthCheckResponse",
    "MailMessage",
    "OffendingIp",
    "SanitizedSubmission",
    "SecurityEvent",
    "SecurityEventType",
    "SecurityReport",
    "Severity",
]
