"""Contact submission pipeline: rate, spam, validation, sanitize, dispatch."""

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger

from contact_api.clients.protocols import MailTransport
from contact_api.configs import (
    INVALID_EMAIL_ERROR,
    REQUIRED_FIELDS_ERROR,
    Settings,
    file_logger,
    settings,
)
from contact_api.errors import EmailDeliveryError, RateLimitedError, SubmissionValidationError
from contact_api.managers.rate_limiter import ContactRateLimiter
from contact_api.managers.security_monitor import SecurityMonitor
from contact_api.schemas.contact import ContactSubmission
from contact_api.schemas.security import SecurityEventType, Severity
from contact_api.services.email_templates import build_auto_reply, build_notification
from contact_api.utils.sanitize import sanitize_submission
from contact_api.utils.validation import is_spam, missing_required_fields, validate_email

logger = file_logger(getLogger(__name__))


class SubmissionOutcome(StrEnum):
    SENT = "sent"
    SPAM_SUPPRESSED = "spam_suppressed"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Who sent the request, as far as the pipeline cares."""

    identifier: str
    user_agent: str = "unknown"


class ContactService:
    """
    Runs one contact submission through every step in order.

    Each rejection raises before any mail transport call is made; the
    honeypot case returns ``SPAM_SUPPRESSED`` so the route can answer
    exactly as it does for a real success.
    """

    def __init__(
        self,
        rate_limiter: ContactRateLimiter,
        mail_transport: MailTransport,
        monitor: SecurityMonitor | None = None,
        config: Settings = settings,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.mail_transport = mail_transport
        self.monitor = monitor
        self._settings = config

    def _record(
        self,
        context: RequestContext,
        event_type: SecurityEventType,
        severity: Severity,
        **details: object,
    ) -> None:
        if self.monitor is not None:
            self.monitor.log_event(event_type, context.identifier, severity, context.user_agent, details)

    async def check_rate(self, context: RequestContext) -> None:
        """
        Count the request against its identifier's window.

        Raises:
            RateLimitedError: The window is used up.
        """
        decision = await self.rate_limiter.hit(context.identifier)
        if not decision.allowed:
            self._record(
                context,
                SecurityEventType.RATE_LIMIT_EXCEEDED,
                Severity.MEDIUM,
                count=decision.count,
                retryAfter=decision.retry_after,
            )
            raise RateLimitedError(retry_after=decision.retry_after)

    def validate(self, submission: ContactSubmission, context: RequestContext) -> None:
        """
        Required-field and email-format checks.

        Raises:
            SubmissionValidationError: With the client-facing message.
        """
        if missing := missing_required_fields(submission.model_dump()):
            self._record(context, SecurityEventType.INVALID_REQUEST, Severity.LOW, missing=missing)
            raise SubmissionValidationError(REQUIRED_FIELDS_ERROR)

        if not validate_email(submission.email):
            self._record(
                context,
                SecurityEventType.INVALID_REQUEST,
                Severity.LOW,
                reason="invalid email",
            )
            raise SubmissionValidationError(INVALID_EMAIL_ERROR)

    async def dispatch(self, submission: ContactSubmission) -> None:
        """
        Sanitize, then send the notification followed by the auto-reply.

        A failure of either send is fatal; the auto-reply is never attempted
        once the notification has failed.

        Raises:
            EmailDeliveryError: Any failure, with the cause chained.
        """
        try:
            sanitized = sanitize_submission(submission)
            await self.mail_transport.send(build_notification(sanitized, self._settings))
            await self.mail_transport.send(build_auto_reply(sanitized, self._settings))
        except Exception as error:
            logger.exception("Error sending contact email")
            raise EmailDeliveryError from error

    async def submit(
        self,
        submission: ContactSubmission,
        context: RequestContext,
    ) -> SubmissionOutcome:
        """
        Process one submission.

        Returns:
            ``SENT`` when both mails went out, ``SPAM_SUPPRESSED`` when the
            honeypot was filled and nothing was sent.
        """
        await self.check_rate(context)

        if is_spam(submission.honeypot):
            self._record(
                context,
                SecurityEventType.SUSPICIOUS_ACTIVITY,
                Severity.LOW,
                reason="honeypot filled",
            )
            logger.info(f"Honeypot triggered for {context.identifier}, suppressing submission")
            return SubmissionOutcome.SPAM_SUPPRESSED

        self.validate(submission, context)
        await self.dispatch(submission)
        logger.info(f"Contact submission relayed for {context.identifier}")
        return SubmissionOutcome.SENT
