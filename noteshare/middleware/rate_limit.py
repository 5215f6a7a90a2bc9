"""
NoteShare Backend — Rate Limiting Middleware
==============================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the timestamps of each client's requests inside the window.
       A request that would exceed the limit gets a 429 built from
       RateLimitExceededError, with Retry-After set to the seconds until the
       oldest counted request leaves the window.

State lives in process memory: one uvicorn worker, one limiter. Health
checks and the API docs are never limited.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from noteshare.config import settings
from noteshare.exceptions import RateLimitExceededError
from noteshare.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: requests allowed per window (default: RATE_LIMIT_REQUESTS)
        window_seconds: window length (default: RATE_LIMIT_WINDOW)
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)

    def _check(self, client_ip: str, now: float) -> None:
        """Record a request, or raise RateLimitExceededError if the window is full."""
        timestamps = self._requests[client_ip]
        window_start = now - self.window_seconds
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            raise RateLimitExceededError(
                retry_after=retry_after,
                context={"client_ip": client_ip, "window_seconds": self.window_seconds},
            )
        timestamps.append(now)

    def _forget_idle_clients(self, now: float) -> None:
        window_start = now - self.window_seconds
        idle = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in idle:
            del self._requests[ip]
        if idle:
            logger.debug("Dropped rate-limit state for %d idle clients", len(idle))

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        try:
            self._check(client_ip, now)
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client_ip,
                self.max_requests,
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": exc.retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        if len(self._requests) > 1000:
            self._forget_idle_clients(now)

        return await call_next(request)
