"""Utility helper functions."""

from contact_api.utils.helpers import client_identifier, get_summary, host, today_str, user_agent
from contact_api.utils.validation import is_spam, validate_email, validate_field, validate_form

__all__ = [
    "client_identifier",
    "get_summary",
    "host",
    "is_spam",
    "today_str",
    "user_agent",
    "validate_email",
    "validate_field",
    "validate_form",
]
