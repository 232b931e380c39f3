from contact_api.managers.rate_limiter import (
    ContactRateLimiter,
    MemoryRateLimitStore,
    RateLimitDecision,
    RateLimitRecord,
    limiter,
    rate_limit_exceeded_handler,
)
from contact_api.managers.security_monitor import SecurityMonitor

__all__ = [
    "ContactRateLimiter",
    "MemoryRateLimitStore",
    "RateLimitDecision",
    "RateLimitRecord",
    "SecurityMonitor",
    "limiter",
    "rate_limit_exceeded_handler",
]
