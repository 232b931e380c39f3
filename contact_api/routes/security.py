"""
Security Routes.

Read-only view over the in-memory security event log, for the site
operator. Requires the ``ADMIN_TOKEN`` bearer token.
"""

from logging import getLogger

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from contact_api.configs import SECURITY_REPORT_PATH, file_logger
from contact_api.dependencies import SecurityMonitorDep, require_admin_token
from contact_api.managers.rate_limiter import limiter
from contact_api.schemas import ErrorResponse, SecurityReport
from contact_api.utils.helpers import client_identifier

logger = file_logger(getLogger(__name__))

router = APIRouter(tags=["🛡️ Security"])


@router.get(
    SECURITY_REPORT_PATH,
    summary="Get the security report",
    response_model=SecurityReport,
    response_class=JSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "totalEvents": 3,
                        "eventsByType": {"XSS_ATTEMPT": 1, "INVALID_REQUEST": 2},
                        "topOffendingIPs": [{"ip": "203.0.113.7", "eventCount": 3}],
                        "recentCriticalEvents": [],
                    },
                },
            },
        },
        401: {"model": ErrorResponse, "description": "Missing or wrong bearer token"},
        429: {
            "description": "Rate limit exceeded",
            "content": {"application/json": {"example": {"error": "Rate limit exceeded: 5 per 1 minute"}}},
        },
        503: {"model": ErrorResponse, "description": "No admin token configured"},
    },
    dependencies=[Depends(require_admin_token)],
    operation_id="security_report",
)
@limiter.limit("5/minute")
async def security_report(
    request: Request,
    monitor: SecurityMonitorDep,
) -> JSONResponse:
    """
    Aggregate security events.

    Notes
    -----
    Rate limited to 5 requests per minute.

    Examples
    --------
    Request
        GET /api/security-report
        Authorization: Bearer <ADMIN_TOKEN>
    Response
        200 OK
        {"totalEvents": 3, "eventsByType": {...}, "topOffendingIPs": [...], "recentCriticalEvents": [...]}
    """
    logger.info(f"Security report requested from {client_identifier(request)}")
    report = monitor.report()
    return JSONResponse(content=report.model_dump(mode="json", by_alias=True))
