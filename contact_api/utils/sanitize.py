"""
Markup sanitization for user text embedded in outbound HTML mail.

Uses BeautifulSoup's ``html.parser`` tree so both variants see the same
parse a mail client would.
"""

from html import escape

from bs4 import BeautifulSoup, Comment

from contact_api.schemas.contact import ContactSubmission, SanitizedSubmission

# Inline formatting kept in the HTML variant of the message; no attributes at all
ALLOWED_TAGS: frozenset[str] = frozenset({"p", "br", "strong", "em", "b", "i", "u"})

# Removed together with everything inside them
DROP_WITH_CONTENT: frozenset[str] = frozenset(
    {"script", "style", "iframe", "object", "embed", "noscript", "template", "svg", "math"},
)


def _parse(markup: str) -> BeautifulSoup:
    soup = BeautifulSoup(markup, "html.parser")
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()
    for tag in soup.find_all(list(DROP_WITH_CONTENT)):
        if not tag.decomposed:
            tag.decompose()
    return soup


def strip_markup(text: str | None) -> str:
    """
    Remove every tag and attribute, keeping the text content.

    Examples:
    --------
    >>> strip_markup("<p>ok</p>")
    'ok'
    >>> strip_markup("<script>alert(1)</script>Hello")
    'Hello'
    """
    if not text:
        return ""
    return _parse(text).get_text()


def sanitize_html(markup: str | None, allowed_tags: frozenset[str] = ALLOWED_TAGS) -> str:
    """
    Reduce markup to ``allowed_tags`` with all attributes removed.

    Tags outside the allow-list are unwrapped (their text survives), except
    the script-like containers in ``DROP_WITH_CONTENT`` which disappear
    entirely. Text nodes come back entity-escaped.
    """
    if not markup:
        return ""

    soup = _parse(markup)
    for tag in soup.find_all(True):
        if tag.name in allowed_tags:
            tag.attrs = {}
        else:
            tag.unwrap()
    return str(soup)


def newlines_to_breaks(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n", "<br>")


def html_text(text: str) -> str:
    """Escape an already stripped value for an HTML body."""
    return escape(text, quote=True)


def sanitize_submission(submission: ContactSubmission) -> SanitizedSubmission:
    """
    Build the display copies of a validated submission.

    ``reply_to`` keeps the raw address: it only ever goes into envelope
    headers, where stripping could silently change the recipient.
    """
    message = submission.message or ""
    return SanitizedSubmission(
        name=strip_markup(submission.name),
        email=strip_markup(submission.email),
        project_type=strip_markup(submission.project_type),
        budget=strip_markup(submission.budget),
        message_text=strip_markup(message),
        message_html=sanitize_html(newlines_to_breaks(message)),
        reply_to=submission.email or "",
    )
