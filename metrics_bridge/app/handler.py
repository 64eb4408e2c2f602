"""HTTP pull handler for the current snapshot"""
import json

from fastapi import APIRouter, Response

from ..errors import SnapshotEncodingError
from ..logging_config import get_logger, log_error


logger = get_logger(__name__)

PULL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
INTERNAL_ERROR_BODY = json.dumps({"error": "Internal Server Error"}, separators=(",", ":"))


def create_pull_router(bridge, path: str = "/metrics") -> APIRouter:
    """Router answering any method on ``path`` with the serialized snapshot"""
    router = APIRouter()

    def pull_metrics() -> Response:
        try:
            body = bridge.serialize_json()
        except SnapshotEncodingError as e:
            log_error(logger, e, {"component": "pull_handler", "path": path})
            return Response(INTERNAL_ERROR_BODY, status_code=500, media_type="application/json")
        return Response(body, media_type="application/json")

    router.add_api_route(
        path,
        pull_metrics,
        methods=PULL_METHODS,
        response_class=Response,
        include_in_schema=False,
    )
    return router
