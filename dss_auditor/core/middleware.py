from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("dss.request")

REQUEST_ID_HEADER = "x-request-id"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log line per request, tagged with the caller's x-request-id
    (Zendesk triggers send one) or a fresh uuid.
    5xx responses and unhandled errors are logged at ERROR.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_id=%s method=%s path=%s unhandled error after %.2fms",
                request_id, request.method, request.url.path,
                (time.perf_counter() - start) * 1000.0,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000.0
        log = logger.error if response.status_code >= 500 else logger.info
        log(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id, request.method, request.url.path, response.status_code, duration_ms,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
