"""
Health check handler
"""

from __future__ import annotations

import logging
from typing import Protocol

from connelly_backend.utils.response import api_response

logger = logging.getLogger()
logger.setLevel(logging.INFO)


class HealthManager(Protocol):
    def health(self) -> dict[str, bool]: ...


def health_handler(event: dict, service: HealthManager) -> dict:
    """Always 200; the body reports whether DynamoDB is reachable."""
    return api_response(200, service.health())
