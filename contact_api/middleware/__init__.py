from contact_api.middleware.middleware import (
    LoggingMiddleware,
    PreflightCORSMiddleware,
    SecurityHeadersMiddleware,
    SecurityMonitorMiddleware,
    configure_cors,
    lifespan,
)

__all__ = [
    "LoggingMiddleware",
    "PreflightCORSMiddleware",
    "SecurityHeadersMiddleware",
    "SecurityMonitorMiddleware",
    "configure_cors",
    "lifespan",
]
