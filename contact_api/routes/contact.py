# contact_api/routes/contact.py
"""
Contact Routes.

The single public endpoint of the service: relays a contact form
submission to the site mailbox and sends the submitter an auto-reply.

Rate Limiting
-------------
Limited per client identifier by ``ContactRateLimiter`` (5 per hour by
default), answered with `429` and a ``Retry-After`` header.
"""

from logging import getLogger

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from contact_api.configs import (
    CONTACT_PATH,
    INVALID_EMAIL_ERROR,
    RATE_LIMIT_ERROR,
    REQUIRED_FIELDS_ERROR,
    SEND_FAILURE_ERROR,
    file_logger,
)
from contact_api.dependencies import ContactServiceDep, RequestContextDep
from contact_api.errors import ALLOWED_METHODS
from contact_api.schemas import ContactResponse, ContactSubmission, ErrorResponse

logger = file_logger(getLogger(__name__))

router = APIRouter(tags=["✉️ Contact"])


def _error_example(message: str) -> dict:
    return {"model": ErrorResponse, "content": {"application/json": {"example": {"error": message}}}}


@router.post(
    CONTACT_PATH,
    summary="Submit the contact form",
    response_model=ContactResponse,
    response_class=JSONResponse,
    responses={
        200: {"content": {"application/json": {"example": {"success": True}}}},
        400: {
            "model": ErrorResponse,
            "content": {
                "application/json": {
                    "examples": {
                        "missing": {"value": {"error": REQUIRED_FIELDS_ERROR}},
                        "email": {"value": {"error": INVALID_EMAIL_ERROR}},
                    },
                },
            },
        },
        429: _error_example(RATE_LIMIT_ERROR),
        500: _error_example(SEND_FAILURE_ERROR),
    },
    operation_id="contact_submit",
)
async def submit_contact(
    request: Request,
    service: ContactServiceDep,
    context: RequestContextDep,
) -> JSONResponse:
    """
    Relay a contact form submission.

    The body is decoded by hand: anything that is not a JSON object is
    treated as an empty submission so the client gets the same `400` as
    for missing fields rather than a schema error.

    Examples
    --------
    Request
        POST /api/contact
        Body: {"name": "Jane", "email": "jane@x.com", "message": "Hi"}
    Response
        200 OK
        {"success": true}
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    await service.submit(ContactSubmission.from_payload(payload), context)
    return JSONResponse(content=ContactResponse().model_dump())


@router.options(CONTACT_PATH, include_in_schema=False)
async def contact_options() -> PlainTextResponse:
    """OPTIONS outside a CORS preflight still answers 200."""
    return PlainTextResponse("OK", headers={"Allow": ALLOWED_METHODS})

