"""File logging helpers with PII redaction."""

from copy import copy
from logging import INFO, Filter, Logger, LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from re import Pattern
from re import compile as re_compile

from pythonjsonlogger.json import JsonFormatter

from contact_api.configs.settings import settings

# Order matters: bearer tokens contain characters the email pattern would split on
PII_PATTERNS: list[tuple[Pattern[str], str]] = [
    (re_compile(r"(?i)bearer\s+[a-z0-9._~+/=-]+"), "Bearer [REDACTED]"),
    (re_compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[REDACTED_EMAIL]"),
]

# Characters to sanitize to prevent log injection
CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})

_file_handler: RotatingFileHandler | None = None


def sanitize_log_message(message: str) -> str:
    r"""
    Escape control characters in a log message.

    Examples:
    --------
    >>> sanitize_log_message("Hello\nWorld")
    'Hello\\nWorld'
    """
    return message.translate(CONTROL_CHARS)


def redact_pii(message: str) -> str:
    """
    Redact PII patterns from log messages.

    Examples:
    --------
    >>> redact_pii("Mail from user@example.com")
    'Mail from [REDACTED_EMAIL]'
    """
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class RedactingFilter(Filter):
    """
    Render the record message once, then redact and escape it.

    Returns a copy: a handler filter that returns a record hands that record
    to its own handler only, so the console keeps the original message.
    """

    def filter(self, record: LogRecord) -> LogRecord:
        redacted = copy(record)
        redacted.msg = redact_pii(sanitize_log_message(record.getMessage()))
        redacted.args = None
        return redacted


def _get_file_handler() -> RotatingFileHandler:
    global _file_handler  # noqa: PLW0603
    if _file_handler is None:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
        )
        _file_handler.setLevel(INFO)
        _file_handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        _file_handler.addFilter(RedactingFilter())
    return _file_handler


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared rotating JSON file handler to ``logger``.

    Does nothing unless ``LOG_TO_FILE`` is enabled.

    Args:
        logger: Module logger, usually ``getLogger(__name__)``.

    Returns:
        The same logger, for one-line module setup.
    """
    if settings.LOG_TO_FILE:
        handler = _get_file_handler()
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger
