"""Application dependencies."""

from secrets import compare_digest
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from contact_api.clients.protocols import MailTransport
from contact_api.configs import settings
from contact_api.errors import ReportUnavailableError, UnauthorizedError
from contact_api.managers.rate_limiter import ContactRateLimiter
from contact_api.managers.security_monitor import SecurityMonitor
from contact_api.services.contact import ContactService, RequestContext
from contact_api.utils.helpers import client_identifier, user_agent

bearer_scheme = HTTPBearer(auto_error=False)


def get_rate_limiter(request: Request) -> ContactRateLimiter:
    return request.app.state.rate_limiter


def get_security_monitor(request: Request) -> SecurityMonitor:
    return request.app.state.security_monitor


def get_email_client(request: Request) -> MailTransport:
    """Mail transport built in the lifespan; tests override this dependency."""
    return request.app.state.email_client


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(identifier=client_identifier(request), user_agent=user_agent(request))


def get_contact_service(
    rate_limiter: Annotated[ContactRateLimiter, Depends(get_rate_limiter)],
    mail_transport: Annotated[MailTransport, Depends(get_email_client)],
    monitor: Annotated[SecurityMonitor, Depends(get_security_monitor)],
) -> ContactService:
    return ContactService(rate_limiter, mail_transport, monitor)


def require_admin_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> None:
    """
    Guard for the admin endpoints.

    Raises:
        ReportUnavailableError: No ``ADMIN_TOKEN`` is configured.
        UnauthorizedError: The bearer token is missing or wrong.
    """
    admin_token = settings.ADMIN_TOKEN.get_secret_value() if settings.ADMIN_TOKEN else ""
    if not admin_token:
        raise ReportUnavailableError

    if credentials is None or not compare_digest(
        credentials.credentials.encode(),
        admin_token.encode(),
    ):
        raise UnauthorizedError


SecurityMonitorDep = Annotated[SecurityMonitor, Depends(get_security_monitor)]
ContactServiceDep = Annotated[ContactService, Depends(get_contact_service)]
RequestContextDep = Annotated[RequestContext, Depends(get_request_context)]
