"""
Health service: reports API liveness and DynamoDB reachability.
"""

from __future__ import annotations

import logging
from typing import Protocol

from connelly_backend.errors import StoreError

logger = logging.getLogger(__name__)


class Pinger(Protocol):
    def ping(self) -> None: ...


class HealthService:
    def __init__(self, store: Pinger):
        self._store = store

    def health(self) -> dict[str, bool]:
        services_health = {"api": True}
        try:
            self._store.ping()
            services_health["db"] = True
        except StoreError as e:
            logger.warning(f"DynamoDB health check failed: {str(e)}")
            services_health["db"] = False
        return services_health
