# tests/services/test_contact_service.py
"""Tests for contact_api/services/contact.py module."""

from typing import Any

import pytest

from contact_api.configs import INVALID_EMAIL_ERROR, REQUIRED_FIELDS_ERROR, SEND_FAILURE_ERROR
from contact_api.errors import EmailDeliveryError, RateLimitedError, SubmissionValidationError
from contact_api.managers.rate_limiter import ContactRateLimiter
from contact_api.managers.security_monitor import SecurityMonitor
from contact_api.schemas import ContactSubmission, SecurityEventType
from contact_api.services.contact import ContactService, RequestContext, SubmissionOutcome

VALID = ContactSubmission(name="Jane", email="jane@x.com", message="Hi")


class TestPipelineOrder:
    """Each step runs strictly after the previous one."""

    async def test_valid_submission_sends_two_mails(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        transport = make_transport()

        outcome = await make_service(transport).submit(VALID, context)

        assert outcome == SubmissionOutcome.SENT
        assert [message.to for message in transport.sent] == ["contact@topea.me", "jane@x.com"]

    async def test_rate_check_precedes_validation(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        service = make_service(make_transport(), max_requests=1)
        empty = ContactSubmission()

        with pytest.raises(SubmissionValidationError):
            await service.submit(empty, context)
        with pytest.raises(RateLimitedError) as exc_info:
            await service.submit(empty, context)

        assert exc_info.value.headers["Retry-After"] == "3600"

    async def test_spam_check_precedes_validation(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
        monitor: SecurityMonitor,
    ) -> None:
        transport = make_transport()

        outcome = await make_service(transport).submit(ContactSubmission(honeypot="x"), context)

        assert outcome == SubmissionOutcome.SPAM_SUPPRESSED
        assert transport.attempts == 0
        assert monitor.events[0].type == SecurityEventType.SUSPICIOUS_ACTIVITY

    async def test_required_fields_before_email_format(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        with pytest.raises(SubmissionValidationError, match=REQUIRED_FIELDS_ERROR):
            await make_service(make_transport()).submit(
                ContactSubmission(name="Jane", email="not-an-email"),
                context,
            )

    async def test_invalid_email(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
        monitor: SecurityMonitor,
    ) -> None:
        transport = make_transport()
        with pytest.raises(SubmissionValidationError, match=INVALID_EMAIL_ERROR):
            await make_service(transport).submit(
                VALID.model_copy(update={"email": "jane@x"}),
                context,
            )

        assert transport.attempts == 0
        assert monitor.events[0].type == SecurityEventType.INVALID_REQUEST


class TestDispatchFailures:
    """Either failed send is fatal and reported generically."""

    async def test_notification_failure_skips_auto_reply(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        transport = make_transport(fail_at=1)

        with pytest.raises(EmailDeliveryError) as exc_info:
            await make_service(transport).submit(VALID, context)

        assert transport.attempts == 1
        assert exc_info.value.detail == SEND_FAILURE_ERROR
        assert "550" in str(exc_info.value.__cause__)

    async def test_auto_reply_failure_is_fatal(
        self,
        make_service: Any,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        transport = make_transport(fail_at=2)

        with pytest.raises(EmailDeliveryError):
            await make_service(transport).submit(VALID, context)

        assert len(transport.sent) == 1

    async def test_works_without_monitor(
        self,
        make_transport: Any,
        context: RequestContext,
    ) -> None:
        service = ContactService(ContactRateLimiter(), make_transport())
        with pytest.raises(SubmissionValidationError):
            await service.submit(ContactSubmission(), context)
