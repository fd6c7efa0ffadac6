"""
Request routing for Connelly Books API

Matches API Gateway proxy events to handlers by HTTP method and path, and
applies the per-client rate limiter and the admin token check in front of
them. Works both with one API Gateway resource per route and with a single
"/{proxy+}" resource, since matching is done on the raw request path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from connelly_backend.handlers.book_handlers import (
    create_book_handler,
    get_book_handler,
    list_books_handler,
)
from connelly_backend.handlers.character_handlers import (
    add_character_books_handler,
    create_character_handler,
    get_character_handler,
)
from connelly_backend.handlers.health_handlers import health_handler
from connelly_backend.handlers.series_handlers import create_series_handler, list_series_handler
from connelly_backend.utils.auth import check_admin, get_client_address
from connelly_backend.utils.rate_limit import RateLimiter
from connelly_backend.utils.response import api_response, error_response

logger = logging.getLogger()
logger.setLevel(logging.INFO)


@dataclass
class Route:
    method: str
    template: str
    handler: Callable[[dict, Any], dict]
    service: Any
    admin: bool = False
    rate_limited: bool = True

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured path parameters when `path` fits the template."""
        template_parts = _split_path(self.template)
        path_parts = _split_path(path)
        if len(template_parts) != len(path_parts):
            return None

        params: dict[str, str] = {}
        for expected, actual in zip(template_parts, path_parts):
            if expected.startswith("{") and expected.endswith("}"):
                params[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return params


def _split_path(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


class Router:
    """
    Args:
        services: Object exposing books, characters, series and health services
        rate_limiter: Injected limiter shared by every rate-limited route
        admin_token: Bearer token required on write routes
    """

    def __init__(self, services: Any, rate_limiter: RateLimiter, admin_token: str):
        self._rate_limiter = rate_limiter
        self._admin_token = admin_token
        self.routes = [
            Route("GET", "/health", health_handler, services.health, rate_limited=False),
            Route("POST", "/books", create_book_handler, services.books, admin=True),
            Route("GET", "/books", list_books_handler, services.books),
            Route("GET", "/books/{bookID}", get_book_handler, services.books),
            Route("POST", "/characters", create_character_handler, services.characters, admin=True),
            Route("GET", "/characters/{character}", get_character_handler, services.characters),
            Route(
                "POST",
                "/characters/{characterID}/books",
                add_character_books_handler,
                services.characters,
                admin=True,
            ),
            Route("POST", "/series", create_series_handler, services.series, admin=True),
            Route("GET", "/series", list_series_handler, services.series),
        ]

    def dispatch(self, event: dict) -> dict:
        """Route one API Gateway proxy event and return its response."""
        method = (event.get("httpMethod") or "GET").upper()
        path = event.get("path") or "/"

        matching = [(route, route.match(path)) for route in self.routes]
        matching = [(route, params) for route, params in matching if params is not None]
        if not matching:
            logger.warning(f"No route for {method} {path}")
            return error_response(404, "not found")

        if method == "OPTIONS":
            return api_response(200, {})

        for route, params in matching:
            if route.method != method:
                continue

            if route.rate_limited:
                client = get_client_address(event)
                if not self._rate_limiter.allow(client):
                    response = error_response(429, "too many requests")
                    response["headers"]["Retry-After"] = str(self._rate_limiter.retry_after(client))
                    return response

            if route.admin:
                error = check_admin(event, self._admin_token)
                if error:
                    logger.warning(f"Rejected unauthorized {method} {path}")
                    return error

            routed_event = {
                **event,
                "pathParameters": {**(event.get("pathParameters") or {}), **params},
            }
            return route.handler(routed_event, route.service)

        return error_response(405, "method not allowed")
