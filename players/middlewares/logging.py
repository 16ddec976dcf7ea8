import json
import logging
import time
import uuid
from typing import Any, Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("players_service")


def _decode(body: bytes) -> Optional[Any]:
    if not body:
        return None
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


class LoggingMiddleware(BaseHTTPMiddleware):
    """Writes one JSON line per request and tags the response with X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        request_body = _decode(await request.body())

        response = await call_next(request)

        chunks = [chunk async for chunk in response.body_iterator]
        response_body_bytes = b"".join(chunks)

        async def replay():
            yield response_body_bytes

        response.body_iterator = replay()

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "request_body": request_body,
            "response_body": _decode(response_body_bytes),
        }
        logger.info(json.dumps(log_data, default=str))

        response.headers["X-Request-ID"] = request_id
        return response
