from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from starlette.routing import BaseRoute, Match, Route


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def client_identifier(request: Request) -> str:
    """
    Resolve the identifier used to key per-client rate limits.

    The first address in ``X-Forwarded-For`` wins (the service sits behind a
    proxy), then the socket address, then the literal ``"unknown"``.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and (first := forwarded.split(",")[0].strip()):
        return first
    return host(request)


def user_agent(request: Request) -> str:
    return request.headers.get("User-Agent") or "unknown"


def today_str() -> str:
    """Return the current local time as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(
        "%Y-%m-%d %H:%M:%S",
    )


def utc_now() -> datetime:
    return datetime.now(UTC)


def get_summary(request: Request) -> str | None:
    """Extract route summary from request."""

    scope: MutableMapping[str, Any] = request.scope
    app: FastAPI = scope["app"]
    routes: list[BaseRoute] = app.routes

    summary = None
    for route in routes:
        is_api_route = type(route) is APIRoute
        is_route = type(route) is Route
        if is_api_route and route.matches(scope)[0] == Match.FULL:
            summary = route.summary
            break
        if is_route and route.matches(scope)[0] == Match.FULL:
            summary = route.name
            break

    return summary
