"""Request Tracing Middleware.

Assigns or propagates an ``X-Request-ID`` per HTTP request, binds it to
every log line emitted while the request runs and logs one completion
line with status and timing.
"""

import logging
import time
from typing import Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LoggingConfig
from src.logging_config.context import RequestContext, generate_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestTracingMiddleware:
    """ASGI middleware adding request ids and access logging.

    Usage:
        app.add_middleware(RequestTracingMiddleware, config=logging_config)
    """

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        self.app = app
        self.config = config or DEFAULT_LOGGING_CONFIG

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _header(scope, REQUEST_ID_HEADER) or generate_request_id()
        method = scope.get("method", "")
        path = scope.get("path", "")
        should_log = path not in self.config.exclude_paths
        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.lower().encode(), request_id.encode()))
                message = {**message, "headers": headers}
            await send(message)

        with RequestContext(request_id=request_id):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                if should_log:
                    duration_ms = (time.perf_counter() - start_time) * 1000
                    if duration_ms > self.config.slow_threshold_ms:
                        level = logging.WARNING
                    elif status_code >= 500:
                        level = logging.ERROR
                    else:
                        level = logging.INFO
                    logger.log(
                        level,
                        "%s %s -> %d",
                        method,
                        path,
                        status_code,
                        extra={
                            "method": method,
                            "path": path,
                            "status_code": status_code,
                            "duration_ms": round(duration_ms, 2),
                        },
                    )


def _header(scope, name: str) -> Optional[str]:
    key = name.lower().encode()
    for header_name, value in scope.get("headers", []):
        if header_name == key and value:
            return value.decode("utf-8", errors="replace")
    return None
