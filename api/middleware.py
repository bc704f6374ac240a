# ============================================================================
# File: api/middleware.py
# ============================================================================

import logging
import re
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
LATENCY_HEADER = "X-API-Latency-ms"

# Caller-supplied ids are echoed back only if they look like ids
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9_.:-]{1,64}$")


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request so backup runs can be traced through the logs.

    Injects:
    - request_id (request.state and X-Request-ID header); a well-formed
      incoming X-Request-ID is reused, e.g. from a reverse proxy
    - api_latency_ms (X-API-Latency-ms header); exports and imports of a
      large database are slow, so this is logged per request
    """

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if _VALID_REQUEST_ID.match(incoming) else new_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        latency_ms = int((time.perf_counter() - started) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[LATENCY_HEADER] = str(latency_ms)

        line = f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({latency_ms}ms)"
        if response.status_code >= 500:
            logger.warning(line)
        else:
            logger.info(line)

        return response


def get_request_id(request: Request) -> str:
    """Id set by the middleware, or a fresh one when it did not run"""
    return getattr(request.state, "request_id", None) or new_request_id()
