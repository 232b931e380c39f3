# tests/services/conftest.py
"""Fixtures for the contact pipeline service."""

from typing import Any

import pytest

from contact_api.managers.rate_limiter import ContactRateLimiter
from contact_api.managers.security_monitor import SecurityMonitor
from contact_api.services.contact import ContactService, RequestContext


@pytest.fixture
def monitor() -> SecurityMonitor:
    return SecurityMonitor()


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(identifier="198.51.100.4", user_agent="Mozilla/5.0")


@pytest.fixture
def make_service(monitor: SecurityMonitor) -> Any:
    def factory(transport: Any, max_requests: int = 5) -> ContactService:
        return ContactService(ContactRateLimiter(max_requests=max_requests), transport, monitor)

    return factory
