# contact_api/middleware/middleware.py
"""
Middleware components for the contact API.

This module contains middleware for CORS, security headers, request
logging and security monitoring. It also contains the lifespan event
handler that builds the in-memory services and tears them down on
shutdown.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import basicConfig, getLogger
from time import perf_counter

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from rich.logging import RichHandler
from rich.traceback import install
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import HTTP_200_OK

from contact_api.clients.email_client import SmtpEmailClient
from contact_api.configs import file_logger, settings
from contact_api.managers.rate_limiter import ContactRateLimiter
from contact_api.managers.security_monitor import SecurityMonitor
from contact_api.utils.helpers import client_identifier, get_summary, user_agent

# --- Logging Configuration ---
basicConfig(
    level=settings.LOG_LEVEL,
    format="%(message)s",
    datefmt="%X",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = file_logger(getLogger("rich"))

install()

CORS_ALLOW_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]

_JSON_CONTENT = "application/json"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application startup and shutdown events with service initialization."""
    # Startup
    logger.info(f"Starting {app.title} ({settings.ENVIRONMENT})...")

    try:
        if settings.LOG_TO_FILE:
            logger.info("Logging to file enabled.")

        rate_limiter = ContactRateLimiter()
        await rate_limiter.start()
        app.state.rate_limiter = rate_limiter

        security_monitor = SecurityMonitor()
        await security_monitor.start()
        app.state.security_monitor = security_monitor

        email_client = SmtpEmailClient()
        app.state.email_client = email_client
        if not email_client.is_configured:
            logger.warning("Mail credentials are not set; contact submissions will fail.")

        if settings.WORKERS > 1:
            logger.warning(
                f"Rate limits are per process: with {settings.WORKERS} workers the "
                f"effective limit is {settings.WORKERS * settings.RATE_LIMIT_MAX_REQUESTS} "
                f"requests per window.",
            )

        logger.info("Services initialized successfully")
        logger.info(f"  - Contact endpoint: http://{settings.HOST}:{settings.PORT}/api/contact")
        logger.info(f"  - Health Check: http://{settings.HOST}:{settings.PORT}/health")

    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    # Shutdown
    logger.info(f"Shutting down {app.title}...")

    try:
        await app.state.rate_limiter.shutdown()
        await app.state.security_monitor.shutdown()
        logger.info("Services cleaned up successfully")

    except Exception:
        logger.exception("Error during service cleanup")


class PreflightCORSMiddleware(CORSMiddleware):
    """
    CORS middleware whose preflight always answers 200.

    A preflight from an origin outside the allow-list still gets 200, just
    without ``Access-Control-Allow-Origin``, so the browser blocks the real
    request while the server reveals nothing about its policy.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code == HTTP_200_OK:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in {"content-length", "content-type"}
        }
        return PlainTextResponse("OK", status_code=HTTP_200_OK, headers=headers)


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request summary and timing information."""

        start_time = perf_counter()
        summary = get_summary(request)

        route_info = summary or f"{request.method} {request.url.path}"
        logger.info(f"Request: {route_info}, from ip: {client_identifier(request)}")

        response = await call_next(request)
        duration = perf_counter() - start_time

        logger.info(
            f"Response: {response.status_code} for {request.method} {request.url.path} "
            f"in {duration:.2f}s",
        )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class SecurityMonitorMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Record injection attempts and unusual requests. Never blocks."""

        monitor: SecurityMonitor | None = getattr(request.app.state, "security_monitor", None)
        if monitor is None:
            return await call_next(request)

        try:
            content_length = int(request.headers.get("content-length", "0"))
        except ValueError:
            content_length = 0

        body = ""
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(_JSON_CONTENT) and content_length <= monitor.max_request_bytes:
            body = (await request.body()).decode("utf-8", errors="replace")

        monitor.inspect_request(
            ip=client_identifier(request),
            user_agent=user_agent(request),
            method=request.method,
            url=str(request.url),
            query=dict(request.query_params),
            body=body,
            content_length=content_length,
        )
        return await call_next(request)
