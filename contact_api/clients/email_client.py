"""SMTP email client used to relay contact submissions."""

from asyncio import get_running_loop
from email.message import EmailMessage
from email.utils import parseaddr
from logging import getLogger
from re import compile as re_compile
from smtplib import SMTP, SMTP_SSL, SMTPAuthenticationError, SMTPException
from ssl import CERT_NONE, SSLContext, create_default_context

from contact_api.configs import Settings, file_logger, settings
from contact_api.errors import ConfigurationError, NetworkError, SendingError
from contact_api.schemas.email import MailMessage

logger = file_logger(getLogger(__name__))

# Regex pattern for header injection prevention
_HEADER_INJECTION_PATTERN = re_compile(r"[\r\n]")


class SmtpEmailClient:
    """
    A client to deliver ``MailMessage`` values over SMTP.

    Each send opens its own connection, so the client holds no socket state
    between requests and is safe to share across concurrent handlers. The
    blocking ``smtplib`` work runs in the default thread pool.
    """

    def __init__(self, config: Settings = settings) -> None:
        self._settings = config

    @property
    def is_configured(self) -> bool:
        return self._settings.mail_configured

    def _validate_email(self, email: str) -> str:
        """
        Validate an address destined for a header.

        Args:
            email: Email address to validate.

        Returns:
            The bare address.

        Raises:
            ValueError: If email is invalid or contains injection characters.
        """
        if _HEADER_INJECTION_PATTERN.search(email):
            mssg = "Email contains invalid characters (potential header injection)"
            raise ValueError(mssg)

        _, addr = parseaddr(email)
        if not addr or "@" not in addr:
            mssg = f"Invalid email address: {email}"
            raise ValueError(mssg)

        return addr

    def _sanitize_header(self, value: str) -> str:
        """Remove newlines so a value cannot start a new header."""
        return _HEADER_INJECTION_PATTERN.sub("", value)

    def _ssl_context(self) -> SSLContext:
        context = create_default_context()
        if not self._settings.MAIL_VALIDATE_CERTS:
            context.check_hostname = False
            context.verify_mode = CERT_NONE
        return context

    def _create_message(self, message: MailMessage) -> EmailMessage:
        """
        Build a multipart/alternative MIME message.

        Raises:
            ValueError: If any address is invalid.
        """
        mime = EmailMessage()
        mime["From"] = self._validate_email(message.sender)
        mime["To"] = self._validate_email(message.to)
        mime["Subject"] = self._sanitize_header(message.subject)
        if message.reply_to:
            mime["Reply-To"] = self._validate_email(message.reply_to)

        mime.set_content(message.text)
        mime.add_alternative(message.html, subtype="html")
        return mime

    def _connect(self) -> SMTP:
        host = self._settings.MAIL_SERVER
        port = self._settings.MAIL_PORT
        timeout = self._settings.MAIL_TIMEOUT

        if self._settings.MAIL_SSL_TLS:
            return SMTP_SSL(host, port, timeout=timeout, context=self._ssl_context())

        server = SMTP(host, port, timeout=timeout)
        if self._settings.MAIL_STARTTLS:
            try:
                server.starttls(context=self._ssl_context())
            except BaseException:
                server.close()
                raise
        return server

    def send_sync(self, message: MailMessage) -> None:
        """
        Blocking send. Should not be called directly within an async route.

        Raises:
            ConfigurationError: Credentials missing or rejected.
            SendingError: The message was malformed or refused.
            NetworkError: The server could not be reached.
        """
        if not self.is_configured:
            mssg = "Mail credentials (MAIL_USERNAME, MAIL_PASSWORD) are not set"
            raise ConfigurationError(mssg)

        try:
            mime = self._create_message(message)
        except ValueError as error:
            raise SendingError(str(error)) from error

        try:
            with self._connect() as server:
                server.login(
                    self._settings.MAIL_USERNAME,
                    self._settings.MAIL_PASSWORD.get_secret_value(),
                )
                server.send_message(mime)
        except SMTPAuthenticationError as error:
            logger.exception("SMTP authentication failed")
            mssg = "SMTP server rejected the credentials"
            raise ConfigurationError(mssg) from error
        # SMTPException is an OSError subclass, so it must come first
        except SMTPException as error:
            logger.exception("SMTP server refused the message")
            mssg = f"SMTP server refused the message: {error}"
            raise SendingError(mssg) from error
        except OSError as error:
            logger.exception("SMTP connection failed")
            mssg = f"Could not reach {self._settings.MAIL_SERVER}:{self._settings.MAIL_PORT}"
            raise NetworkError(mssg) from error

        logger.info(f"Email sent: {message.subject}")

    async def send(self, message: MailMessage) -> None:
        """Send without blocking the event loop."""
        loop = get_running_loop()
        await loop.run_in_executor(None, self.send_sync, message)
