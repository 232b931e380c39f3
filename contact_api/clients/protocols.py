"""Protocol definitions for pluggable collaborators."""

from collections.abc import Awaitable, Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contact_api.managers.rate_limiter import RateLimitRecord
    from contact_api.schemas.email import MailMessage


@runtime_checkable
class MailTransport(Protocol):
    """
    Anything that can deliver a ``MailMessage``.

    ``send`` returns on success and raises an ``EmailServiceError`` on any
    failure; there is no partial result.
    """

    def send(self, message: "MailMessage") -> Awaitable[None]:
        """Deliver one message."""
        ...


@runtime_checkable
class RateLimitStore(Protocol):
    """
    Backing store for per-identifier rate-limit records.

    The in-memory store is process local; a shared implementation (Redis,
    a KV service) makes the limit global across workers.
    """

    def get(self, identifier: str) -> "RateLimitRecord | None":
        """Return the record for ``identifier`` if one exists."""
        ...

    def set(self, identifier: str, record: "RateLimitRecord") -> None:
        """Create or replace the record for ``identifier``."""
        ...

    def delete(self, *identifiers: str) -> int:
        """Remove records, returning how many existed."""
        ...

    def items(self) -> Iterator[tuple[str, "RateLimitRecord"]]:
        """Iterate over a snapshot of all records."""
        ...

    def clear(self) -> None:
        """Drop every record."""
        ...

    def __len__(self) -> int: ...
