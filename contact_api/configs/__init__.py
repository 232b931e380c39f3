from contact_api.configs.logger import file_logger, redact_pii, sanitize_log_message
from contact_api.configs.settings import (
    CONTACT_PATH,
    INVALID_EMAIL_ERROR,
    NOT_SPECIFIED,
    RATE_LIMIT_ERROR,
    REQUIRED_FIELDS_ERROR,
    SECURITY_REPORT_PATH,
    SEND_FAILURE_ERROR,
    LimiterConfig,
    Settings,
    settings,
)

__all__ = [
    "CONTACT_PATH",
    "INVALID_EMAIL_ERROR",
    "NOT_SPECIFIED",
    "RATE_LIMIT_ERROR",
    "REQUIRED_FIELDS_ERROR",
    "SECURITY_REPORT_PATH",
    "SEND_FAILURE_ERROR",
    "LimiterConfig",
    "Settings",
    "file_logger",
    "redact_pii",
    "sanitize_log_message",
    "settings",
]
