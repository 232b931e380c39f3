# tests/clients/test_email_client.py
"""Tests for contact_api/clients/email_client.py module."""

from collections.abc import Generator
from smtplib import SMTPAuthenticationError, SMTPException
from ssl import CERT_NONE, CERT_REQUIRED
from unittest.mock import MagicMock, patch

import pytest

from contact_api.clients.email_client import _HEADER_INJECTION_PATTERN, SmtpEmailClient
from contact_api.clients.protocols import MailTransport
from contact_api.configs import Settings
from contact_api.errors import ConfigurationError, NetworkError, SendingError
from contact_api.schemas import MailMessage


@pytest.fixture
def config() -> Settings:
    return Settings(MAIL_USERNAME="contact@topea.me", MAIL_PASSWORD="secret")


@pytest.fixture
def email_client(config: Settings) -> SmtpEmailClient:
    return SmtpEmailClient(config=config)


@pytest.fixture
def message() -> MailMessage:
    return MailMessage(
        sender="contact@topea.me",
        to="contact@topea.me",
        reply_to="jane@x.com",
        subject="New Contact Form Submission from Jane",
        text="Name: Jane",
        html="<p><strong>Name:</strong> Jane</p>",
    )


@pytest.fixture
def smtp_ssl() -> Generator[MagicMock]:
    with patch("contact_api.clients.email_client.SMTP_SSL") as mock_smtp:
        yield mock_smtp


class TestEmailClientValidation:
    """Tests for address validation and header sanitization."""

    def test_validate_email_valid_address(self, email_client: SmtpEmailClient) -> None:
        assert email_client._validate_email("user@example.com") == "user@example.com"

    def test_validate_email_with_header_injection(self, email_client: SmtpEmailClient) -> None:
        with pytest.raises(ValueError, match="header injection"):
            email_client._validate_email("user@example.com\nBcc: attacker@evil.com")

    def test_validate_email_without_at(self, email_client: SmtpEmailClient) -> None:
        with pytest.raises(ValueError, match="Invalid email address"):
            email_client._validate_email("invalid-email")

    def test_sanitize_header_removes_newlines(self, email_client: SmtpEmailClient) -> None:
        assert email_client._sanitize_header("Subject\r\nBcc: x") == "SubjectBcc: x"
        assert _HEADER_INJECTION_PATTERN.search("a\rb")

    def test_satisfies_transport_protocol(self, email_client: SmtpEmailClient) -> None:
        assert isinstance(email_client, MailTransport)


class TestCreateMessage:
    def test_multipart_alternative(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
    ) -> None:
        mime = email_client._create_message(message)

        assert mime["From"] == "contact@topea.me"
        assert mime["Reply-To"] == "jane@x.com"
        assert mime.get_content_type() == "multipart/alternative"
        assert mime.get_body(("plain",)).get_content().strip() == "Name: Jane"
        assert "<strong>Name:</strong>" in mime.get_body(("html",)).get_content()

    def test_no_reply_to_header_when_absent(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
    ) -> None:
        mime = email_client._create_message(message.model_copy(update={"reply_to": None}))
        assert mime["Reply-To"] is None

    def test_ssl_context_respects_certificate_setting(self) -> None:
        strict = SmtpEmailClient(config=Settings(MAIL_VALIDATE_CERTS=True))
        relaxed = SmtpEmailClient(config=Settings(MAIL_VALIDATE_CERTS=False))

        assert strict._ssl_context().verify_mode == CERT_REQUIRED
        assert relaxed._ssl_context().verify_mode == CERT_NONE


class TestSend:
    """Tests for the SMTP send path and its error mapping."""

    def test_send_sync_success(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        email_client.send_sync(message)

        smtp_ssl.assert_called_once()
        assert smtp_ssl.call_args.args == ("mail.topea.me", 465)
        server = smtp_ssl.return_value.__enter__.return_value
        server.login.assert_called_once_with("contact@topea.me", "secret")
        server.send_message.assert_called_once()

    async def test_async_send_runs_in_executor(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        await email_client.send(message)
        smtp_ssl.return_value.__enter__.return_value.send_message.assert_called_once()

    def test_starttls_connection(self, message: MailMessage) -> None:
        config = Settings(MAIL_PASSWORD="secret", MAIL_SSL_TLS=False, MAIL_STARTTLS=True, MAIL_PORT=587)
        with patch("contact_api.clients.email_client.SMTP") as mock_smtp:
            SmtpEmailClient(config=config).send_sync(message)

        mock_smtp.return_value.starttls.assert_called_once()

    def test_not_configured(self, message: MailMessage) -> None:
        client = SmtpEmailClient(config=Settings(MAIL_PASSWORD=""))
        with pytest.raises(ConfigurationError):
            client.send_sync(message)

    def test_invalid_address_is_sending_error(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        bad = message.model_copy(update={"reply_to": "jane@x.com\r\nBcc: all@x.com"})
        with pytest.raises(SendingError):
            email_client.send_sync(bad)
        smtp_ssl.assert_not_called()

    def test_auth_failure(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        server = smtp_ssl.return_value.__enter__.return_value
        server.login.side_effect = SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(ConfigurationError) as exc_info:
            email_client.send_sync(message)
        assert "bad credentials" not in exc_info.value.detail

    def test_refused_message(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        smtp_ssl.return_value.__enter__.return_value.send_message.side_effect = SMTPException(
            "554 rejected",
        )
        with pytest.raises(SendingError):
            email_client.send_sync(message)

    def test_unreachable_server(
        self,
        email_client: SmtpEmailClient,
        message: MailMessage,
        smtp_ssl: MagicMock,
    ) -> None:
        smtp_ssl.side_effect = ConnectionRefusedError("refused")
        with pytest.raises(NetworkError):
            email_client.send_sync(message)
