# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os

# Settings are read once at import time, so this must happen before
# contact_api is imported anywhere
os.environ["ENVIRONMENT"] = "development"
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["MAIL_PASSWORD"] = "test-mail-password"
os.environ["LOG_TO_FILE"] = "false"

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from contact_api.dependencies import get_email_client  # noqa: E402
from contact_api.errors import SendingError  # noqa: E402
from contact_api.main import app  # noqa: E402
from contact_api.managers import limiter  # noqa: E402
from contact_api.schemas import MailMessage  # noqa: E402

ADMIN_TOKEN = "test-admin-token"

VALID_SUBMISSION = {"name": "Jane", "email": "jane@x.com", "message": "Hi"}


class RecordingTransport:
    """Mail transport that keeps every message instead of sending it."""

    def __init__(self, fail_at: int | None = None) -> None:
        self.sent: list[MailMessage] = []
        self.attempts = 0
        self.fail_at = fail_at

    async def send(self, message: MailMessage) -> None:
        self.attempts += 1
        if self.fail_at is not None and self.attempts == self.fail_at:
            mssg = "550 mailbox unavailable at smtp.internal:465"
            raise SendingError(mssg)
        self.sent.append(message)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(transport: RecordingTransport) -> Generator[TestClient]:
    """TestClient with a running lifespan and the recording mail transport."""
    limiter.reset()
    app.dependency_overrides[get_email_client] = lambda: transport
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_transport() -> type[RecordingTransport]:
    return RecordingTransport
