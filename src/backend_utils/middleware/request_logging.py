import json

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from backend_utils.shared import Logger
from backend_utils.utils import convert_request_data, describe_request

logger = Logger(__name__).get_logger()


class RequestLogging(BaseHTTPMiddleware):
    """Logs every incoming request with its sensitive fields masked."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        body = await self._read_json_body(request)
        request_data = convert_request_data(describe_request(request, body))
        logger.info("Incoming request: %s", json.dumps(request_data, default=str))

        response = await call_next(request)
        logger.debug(
            "%s %s -> %s", request.method, request.url.path, response.status_code
        )
        return response

    @staticmethod
    async def _read_json_body(request: Request):
        if "application/json" not in request.headers.get("content-type", ""):
            return None

        raw = await request.body()
        if not raw:
            return None

        try:
            return json.loads(raw)
        except (ValueError, UnicodeDecodeError):
            # Left for the validation handlers to report
            return None
