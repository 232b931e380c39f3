from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contact_api.utils.helpers import utc_now


class SecurityEventType(StrEnum):
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    BLOCKED_IP = "BLOCKED_IP"
    INVALID_REQUEST = "INVALID_REQUEST"
    XSS_ATTEMPT = "XSS_ATTEMPT"
    SQL_INJECTION_ATTEMPT = "SQL_INJECTION_ATTEMPT"


class Severity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SecurityEvent(BaseModel):
    """Append-only record of a suspicious request."""

    model_config = ConfigDict(frozen=True)

    type: SecurityEventType
    ip: str
    user_agent: str = Field(default="unknown", serialization_alias="userAgent")
    severity: Severity
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)


class OffendingIp(BaseModel):
    ip: str
    event_count: int = Field(..., serialization_alias="eventCount")


class SecurityReport(BaseModel):
    """Aggregate view served by the security report endpoint."""

    total_events: int = Field(..., serialization_alias="totalEvents")
    events_by_type: dict[str, int] = Field(..., serialization_alias="eventsByType")
    top_offending_ips: list[OffendingIp] = Field(..., serialization_alias="topOffendingIPs")
    recent_critical_events: list[SecurityEvent] = Field(
        ...,
        serialization_alias="recentCriticalEvents",
    )
