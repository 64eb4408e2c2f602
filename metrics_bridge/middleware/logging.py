"""Request logging middleware"""
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ..logging_config import get_logger


logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log served requests.

    Collectors pull the snapshot every few seconds, so pulls are logged at
    debug level; anything else (health and status probes) at info.
    """

    def __init__(self, app: ASGIApp, metrics_path: str = "/metrics"):
        super().__init__(app)
        self.metrics_path = metrics_path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = round(time.perf_counter() - start_time, 4)

        if request.url.path == self.metrics_path:
            logger.debug(
                "Snapshot pulled",
                method=request.method,
                status_code=response.status_code,
                elapsed_seconds=elapsed,
                event_type="snapshot_pulled"
            )
        else:
            logger.info(
                "HTTP request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                elapsed_seconds=elapsed,
                event_type="http_request_complete"
            )
        return response
