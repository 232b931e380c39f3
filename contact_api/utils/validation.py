"""
Field rules shared by the contact endpoint and the submission client.

Every function here is pure: no I/O, no logging, so the endpoint can run
them before touching the mail transport.
"""

from collections.abc import Mapping
from re import ASCII, IGNORECASE
from re import compile as re_compile

# ASCII: Unicode case folding would let [A-Z] match characters such as U+017F
EMAIL_PATTERN = re_compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", IGNORECASE | ASCII)

REQUIRED_FIELDS: tuple[str, ...] = ("name", "email", "message")


def validate_email(value: str | None) -> bool:
    """
    Check an address against the site's email pattern.

    Examples:
    --------
    >>> validate_email("a@b.co")
    True
    >>> validate_email("a@b")
    False
    >>> validate_email("a b@c.com")
    False
    """
    if not value:
        return False
    # fullmatch: "$" alone would accept a trailing newline
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_spam(honeypot: str | None) -> bool:
    """Any value in the hidden field means a script filled the form."""
    return bool(honeypot)


def missing_required_fields(fields: Mapping[str, str | None]) -> list[str]:
    """Return the required fields that are absent or empty, in form order."""
    return [name for name in REQUIRED_FIELDS if not fields.get(name)]


def validate_form(fields: Mapping[str, str | None]) -> dict[str, str]:
    """
    Field-level errors as the contact form shows them.

    Whitespace-only input counts as empty here, unlike the server-side
    required check which only rejects empty values.

    Returns:
        Mapping of field name to message; empty when the form is valid.
    """
    errors: dict[str, str] = {}
    for name in REQUIRED_FIELDS:
        if error := validate_field(name, fields.get(name)):
            errors[name] = error
    return errors


def validate_field(name: str, value: str | None) -> str | None:
    """Validate one field in isolation, for live validation while typing."""
    value = (value or "").strip()
    if name == "name" and not value:
        return "Name is required"
    if name == "email":
        if not value:
            return "Email is required"
        if not validate_email(value):
            return "Invalid email address"
    if name == "message" and not value:
        return "Message is required"
    return None
