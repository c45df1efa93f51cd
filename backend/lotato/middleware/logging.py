"""
backend/lotato/middleware/logging.py

Purpose:
    Request logging as one JSON line per request, plus root logger setup.
    Client IPs are logged as a short hash only.

Dependencies:
    - starlette
"""

import hashlib
import json
import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("lotato.http")

_QUIET_PATHS = frozenset({"/health"})


def _ip_hash(request: Request) -> Optional[str]:
    if not request.client:
        return None
    return hashlib.sha256((request.client.host or "").encode()).hexdigest()[:12]


def _level_for(path: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (reusing X-Request-ID when sent) and logs it."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        entry = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip_hash": _ip_hash(request),
        }
        logger.log(_level_for(request.url.path, response.status_code), json.dumps(entry))

        response.headers["X-Request-ID"] = request_id
        return response


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    # Keep pymongo heartbeats out of DEBUG service logs.
    logging.getLogger("pymongo").setLevel(max(logging.INFO, logging.getLogger().level))
