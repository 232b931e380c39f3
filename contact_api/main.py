# contact_api/main.py

"""Topea Contact API - contact form relay with rate limiting and security monitoring."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from contact_api.configs import settings
from contact_api.errors import (
    BaseAppError,
    EmailServiceError,
    ReportUnavailableError,
    UnauthorizedError,
    contact_exception_handler,
    email_client_exception_handler,
    method_not_allowed_handler,
    security_exception_handler,
)
from contact_api.managers import limiter, rate_limit_exceeded_handler
from contact_api.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    SecurityMonitorMiddleware,
    configure_cors,
    lifespan,
)
from contact_api.routes import contact_router, security_router
from contact_api.schemas import HealthCheckResponse
from contact_api.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="Contact form relay for the Topea website",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    swagger_ui_parameters={"docExpansion": "none", "operationsSorter": "method"},
)

configure_cors(app)

app.add_middleware(SecurityMonitorMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

routes = [contact_router, security_router]

_ = [app.include_router(router) for router in routes]

# Handlers are looked up along the exception MRO, so subclasses of BaseAppError
# without their own entry fall through to the contact handler
errors = [
    (StarletteHTTPException, method_not_allowed_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (EmailServiceError, email_client_exception_handler),
    (UnauthorizedError, security_exception_handler),
    (ReportUnavailableError, security_exception_handler),
    (BaseAppError, contact_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=JSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 12:00:00",
                        "environment": "production",
                        "email_client": "configured",
                        "rate_limit_records": 3,
                        "security_events": 12,
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> JSONResponse:
    """
    Liveness probe with in-memory service sizes.

    Examples
    --------
    Request
        GET /health
    Response
        200 OK
        {"version": "1.0.0", "status": "ok", "email_client": "configured", ...}
    """
    state = request.app.state
    email_client = getattr(state, "email_client", None)
    rate_limiter = getattr(state, "rate_limiter", None)
    monitor = getattr(state, "security_monitor", None)

    response = HealthCheckResponse(
        version=app.version,
        timestamp=today_str(),
        environment=settings.ENVIRONMENT,
        email_client="configured" if email_client and email_client.is_configured else "not_configured",
        rate_limit_records=len(rate_limiter) if rate_limiter is not None else 0,
        security_events=len(monitor) if monitor is not None else 0,
    )
    return JSONResponse(content=response.model_dump())
