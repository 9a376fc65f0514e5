"""Liveness probe used by orchestration health checks."""
from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from webapp.core.utils import utcnow
from webapp.repositories.sql_repository import HealthRepository

logger = logging.getLogger(__name__)


class LivenessStatus(str, enum.Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    BAD_REQUEST = "bad_request"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def has_request_body(headers: Mapping[str, str]) -> bool:
    """True when the request announces a payload (Content-Length > 0 or chunked)."""
    content_length = (_header(headers, "Content-Length") or "").strip()
    if content_length:
        try:
            if int(content_length) > 0:
                return True
        except ValueError:
            logger.debug("Unparseable Content-Length %r, treating as no body", content_length)
    transfer_encoding = (_header(headers, "Transfer-Encoding") or "").strip().lower()
    return "chunked" in transfer_encoding


class LivenessProber:
    def __init__(self, repository: HealthRepository | None = None, clock: Callable[[], datetime] | None = None) -> None:
        self.repository = repository or HealthRepository()
        self.clock = clock or utcnow

    def check(self, query_string: str | bytes | None, headers: Mapping[str, str]) -> LivenessStatus:
        """Validate the request shape, then round-trip the store and record the probe.

        A query string or a body rejects the request before the store is touched.
        Store failures never propagate; they yield UNHEALTHY.
        """
        if query_string:
            logger.warning("Liveness request carries a query string: %r", query_string)
            return LivenessStatus.BAD_REQUEST
        if has_request_body(headers):
            logger.warning("Liveness request carries a payload")
            return LivenessStatus.BAD_REQUEST
        try:
            if self.repository.ping() != 1:
                logger.error("Database connection test failed")
                return LivenessStatus.UNHEALTHY
            record = self.repository.record(self.clock())
        except Exception:
            logger.error("Liveness check failed", exc_info=True)
            return LivenessStatus.UNHEALTHY
        logger.debug("Liveness check recorded as %s", getattr(record, "check_id", None))
        return LivenessStatus.HEALTHY
