from collections import deque
from time import monotonic

from fastapi import HTTPException, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from backend_utils.shared import Logger

logger = Logger(__name__).get_logger()

DEVELOPMENT_TOKEN_HEADER = "x-development-token"


class RateLimit(BaseHTTPMiddleware):
    """Rate Limit middleware for FastApi endpoints
    Based loosely on sliding window rate limiting, keyed by client IP.
    Requests carrying the configured development token are never limited.
    """

    def __init__(
        self,
        app,
        dispatch=None,
        timeout_period_s: float = 10,
        max_per_second: int = 10,
        development_token: str | None = None,
    ):
        super().__init__(app, dispatch)

        # Params
        self.__max_per_second = max_per_second
        self.__timeout_period_s = timeout_period_s
        self.__development_token = development_token

        # Checks
        self.__bucket: dict[str, deque[float]] = {}
        self.__timeout_club: dict[str, float] = {}

        # Time
        self.__now = monotonic()
        self.__last_sweep = self.__now

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            # Skip rate limiting for OPTIONS requests (CORS preflight)
            if request.method == "OPTIONS" or self.__is_development(request):
                return await call_next(request)

            host = request.client.host if request.client else "unknown"

            self.__now = monotonic()
            self.__sweep()
            self.__check(host)

            return await call_next(request)
        except HTTPException as e:
            logger.warning("Rate limited %s %s", request.method, request.url.path)
            return Response(status_code=e.status_code)

    @property
    def tracked_clients(self) -> int:
        return len(self.__bucket.keys() | self.__timeout_club.keys())

    def __is_development(self, request: Request) -> bool:
        if not self.__development_token:
            return False
        return request.headers.get(DEVELOPMENT_TOKEN_HEADER) == self.__development_token

    def __check(self, key: str):
        # record the connection timestamp
        # if property is in timeout; then reject
        # lazyily prune old records
        # after pruning, if records exceeds
        # `max_per_second` then reject

        self.__create_deque(key)
        self.__timeout_check(key)

        queue = self.__bucket[key]
        queue.append(self.__now)

        while self.__now - queue[0] > 1:
            queue.popleft()

        if len(queue) > self.__max_per_second:
            self.__timeout(key)
            raise HTTPException(status_code=429, detail="Too many requests.")

    def __sweep(self):
        # at most once per window; drop idle clients and served timeouts
        if self.__now - self.__last_sweep < 1:
            return
        self.__last_sweep = self.__now

        idle = [k for k, q in self.__bucket.items() if not q or self.__now - q[-1] > 1]
        for key in idle:
            del self.__bucket[key]

        expired = [
            k
            for k, timestamp in self.__timeout_club.items()
            if self.__now - timestamp > self.__timeout_period_s
        ]
        for key in expired:
            del self.__timeout_club[key]

    def __create_deque(self, key: str):
        if key not in self.__bucket:
            self.__bucket[key] = deque()

    def __timeout_check(self, key: str):
        if key not in self.__timeout_club:
            return

        timeout_timestamp = self.__timeout_club[key]

        if self.__now - timeout_timestamp > self.__timeout_period_s:
            del self.__timeout_club[key]
        else:
            raise HTTPException(status_code=429, detail="Too many requests.")

    def __timeout(self, key: str):
        self.__timeout_club[key] = monotonic()
