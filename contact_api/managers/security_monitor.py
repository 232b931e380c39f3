# contact_api/managers/security_monitor.py
"""
Security event monitoring.

Records suspicious requests in a bounded in-memory log, raises alerts when
an IP crosses a per-type threshold within the alert window, and serves the
aggregate report behind the admin endpoint.

Features:
    - Injection and XSS signature matching over URL, query and body
    - Suspicious user agent, oversized body and unusual method detection
    - Bounded event log (oldest evicted first)
    - Hourly pruning of events older than the retention period
    - Explicit start/shutdown lifecycle
"""

from asyncio import CancelledError, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections import Counter, deque
from collections.abc import Callable, Mapping
from contextlib import suppress
from datetime import datetime, timedelta
from json import dumps
from logging import getLogger
from re import IGNORECASE, Pattern
from re import compile as re_compile
from typing import Any

from contact_api.configs import file_logger, settings
from contact_api.schemas.security import (
    OffendingIp,
    SecurityEvent,
    SecurityEventType,
    SecurityReport,
    Severity,
)
from contact_api.utils.helpers import utc_now

logger = file_logger(getLogger(__name__))

EventType = SecurityEventType

ALERT_THRESHOLDS: dict[SecurityEventType, int] = {
    EventType.RATE_LIMIT_EXCEEDED: 5,
    EventType.SUSPICIOUS_ACTIVITY: 3,
    EventType.BLOCKED_IP: 1,
    EventType.INVALID_REQUEST: 3,
    EventType.XSS_ATTEMPT: 1,
    EventType.SQL_INJECTION_ATTEMPT: 1,
}

XSS_PATTERNS: tuple[Pattern[str], ...] = tuple(
    re_compile(pattern, IGNORECASE)
    for pattern in (
        r"<script",
        r"javascript:",
        r"on\w+\s*=",
        r"<iframe",
        r"eval\(",
        r"document\.cookie",
    )
)

SQL_INJECTION_PATTERNS: tuple[Pattern[str], ...] = tuple(
    re_compile(pattern, IGNORECASE)
    for pattern in (
        r"union\s+select",
        r"drop\s+table",
        r"insert\s+into",
        r"delete\s+from",
        r"update\s+set",
        r"'\s*or\s*'1'\s*=\s*'1",
        r"'\s*or\s*1\s*=\s*1",
    )
)

SUSPICIOUS_USER_AGENTS: tuple[Pattern[str], ...] = tuple(
    re_compile(pattern, IGNORECASE)
    for pattern in ("bot", "crawler", "spider", "scraper", "curl", "wget", "python", "php")
)

STANDARD_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"},
)

TOP_OFFENDERS = 10
RECENT_CRITICAL = 20


def _matches(patterns: tuple[Pattern[str], ...], *haystacks: str) -> bool:
    return any(pattern.search(text) for pattern in patterns for text in haystacks)


class SecurityMonitor:
    """
    In-memory security event log with threshold alerts.

    All mutations are plain synchronous operations with no awaits in
    between, so they are atomic with respect to the event loop.
    """

    def __init__(
        self,
        max_events: int = settings.SECURITY_MAX_EVENTS,
        retention: float = settings.SECURITY_RETENTION,
        prune_interval: float = settings.SECURITY_PRUNE_INTERVAL,
        alert_window: float = settings.SECURITY_ALERT_WINDOW,
        max_request_bytes: int = settings.MAX_REQUEST_BYTES,
        clock: Callable[[], datetime] = utc_now,
        thresholds: Mapping[SecurityEventType, int] = ALERT_THRESHOLDS,
    ) -> None:
        self.max_events = max_events
        self.retention = timedelta(seconds=retention)
        self.prune_interval = prune_interval
        self.alert_window = timedelta(seconds=alert_window)
        self.max_request_bytes = max_request_bytes
        self.thresholds = dict(thresholds)
        self._clock = clock
        self._events: deque[SecurityEvent] = deque(maxlen=max_events)
        self._prune_task: Task[None] | None = None
        self._shut_down = False

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> list[SecurityEvent]:
        return list(self._events)

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def log_event(
        self,
        event_type: SecurityEventType,
        ip: str,
        severity: Severity,
        user_agent: str = "unknown",
        details: Mapping[str, Any] | None = None,
    ) -> SecurityEvent:
        """Append an event, evicting the oldest beyond capacity, and check thresholds."""
        event = SecurityEvent(
            type=event_type,
            ip=ip,
            user_agent=user_agent,
            severity=severity,
            details=dict(details or {}),
            timestamp=self._clock(),
        )
        self._events.append(event)

        if settings.is_production:
            logger.warning(f"[SECURITY] {event_type}: {ip} {event.details}")

        self._check_alert_threshold(event)
        return event

    def recent_events(
        self,
        ip: str,
        event_type: SecurityEventType,
        window: timedelta | None = None,
    ) -> list[SecurityEvent]:
        """Events of ``event_type`` from ``ip`` within ``window`` (the alert window by default)."""
        cutoff = self._clock() - (window or self.alert_window)
        return [
            event
            for event in self._events
            if event.ip == ip and event.type == event_type and event.timestamp > cutoff
        ]

    def _check_alert_threshold(self, event: SecurityEvent) -> None:
        recent = self.recent_events(event.ip, event.type)
        if len(recent) >= self.thresholds.get(event.type, 1):
            self._send_alert(event, len(recent))

    def _send_alert(self, event: SecurityEvent, event_count: int) -> None:
        minutes = int(self.alert_window.total_seconds() // 60)
        logger.error(
            f"[SECURITY ALERT] {event.type} from IP {event.ip} "
            f"({event_count} events in last {minutes} minutes)",
        )

    def inspect_request(
        self,
        *,
        ip: str,
        user_agent: str,
        method: str,
        url: str,
        query: Mapping[str, Any] | None = None,
        body: str = "",
        content_length: int = 0,
    ) -> list[SecurityEvent]:
        """
        Match one request against attack signatures and unusual patterns.

        Detection only records events; it never blocks the request.

        Returns:
            The events logged for this request.
        """
        logged: list[SecurityEvent] = []
        url_text = url.lower()
        query_text = dumps(dict(query or {})).lower()
        body_text = body.lower()
        request_details = {"url": url, "method": method, "query": dict(query or {})}
        if body:
            request_details["body"] = body[:500]

        if _matches(XSS_PATTERNS, url_text, query_text, body_text):
            logged.append(
                self.log_event(EventType.XSS_ATTEMPT, ip, Severity.CRITICAL, user_agent, request_details),
            )

        if _matches(SQL_INJECTION_PATTERNS, url_text, query_text, body_text):
            logged.append(
                self.log_event(
                    EventType.SQL_INJECTION_ATTEMPT,
                    ip,
                    Severity.CRITICAL,
                    user_agent,
                    request_details,
                ),
            )

        unusual: list[dict[str, Any]] = []
        if _matches(SUSPICIOUS_USER_AGENTS, user_agent):
            unusual.append({"reason": "Suspicious user agent", "userAgent": user_agent})
        if content_length > self.max_request_bytes:
            unusual.append({"reason": "Large request size", "contentLength": content_length})
        if method.upper() not in STANDARD_METHODS:
            unusual.append({"reason": "Unusual HTTP method", "method": method})

        logged.extend(
            self.log_event(
                EventType.SUSPICIOUS_ACTIVITY,
                ip,
                Severity.MEDIUM,
                user_agent,
                {**details, "url": url},
            )
            for details in unusual
        )
        return logged

    def prune(self) -> int:
        """Drop events older than the retention period. Returns the count removed."""
        cutoff = self._clock() - self.retention
        kept = [event for event in self._events if event.timestamp > cutoff]
        removed = len(self._events) - len(kept)
        if removed:
            self._events = deque(kept, maxlen=self.max_events)
            logger.info(f"Security monitor pruned {removed} events older than {self.retention}")
        return removed

    def report(self) -> SecurityReport:
        """Aggregate counts for the admin report."""
        by_type = Counter(str(event.type) for event in self._events)
        by_ip = Counter(event.ip for event in self._events)
        critical = [event for event in self._events if event.severity == Severity.CRITICAL]

        return SecurityReport(
            total_events=len(self._events),
            events_by_type=dict(by_type),
            top_offending_ips=[
                OffendingIp(ip=ip, event_count=count)
                for ip, count in by_ip.most_common(TOP_OFFENDERS)
            ],
            recent_critical_events=critical[-RECENT_CRITICAL:],
        )

    async def start(self) -> None:
        """Start the periodic pruning task."""
        if self._prune_task is None or self._prune_task.done():
            self._shut_down = False
            self._prune_task = create_task(self._prune_loop())
            logger.info("Security monitor pruning task started.")

    async def _prune_loop(self) -> None:
        while not self._shut_down:
            try:
                await asyncio_sleep(self.prune_interval)
                self.prune()
            except CancelledError:
                break
            except Exception:
                logger.exception("Error in security monitor prune loop")

    async def shutdown(self) -> None:
        """Cancel the pruning task and purge all events."""
        self._shut_down = True
        if task := self._prune_task:
            task.cancel()
            with suppress(CancelledError):
                await task
            self._prune_task = None

        self._events.clear()
        logger.info("SecurityMonitor cleanup completed: task cancelled and events purged")

