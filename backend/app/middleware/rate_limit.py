"""
CuriousDog Backend — Rate Limiting Middleware
===============================================

What:  Per-IP sliding window limits with a separate budget for writes.
How:   Keeps request timestamps per (IP, bucket) in memory. The "write"
       bucket (POST/PUT/PATCH/DELETE: asking, answering, registering,
       uploading) has a much smaller budget than the "read" bucket, which
       keeps anonymous-question spam in check without throttling feeds.
When:  First middleware in the chain, so rejected requests do no other work.

Algorithm: Sliding Window Log
    1. Drop timestamps older than settings.rate_limit_window seconds
    2. If the remaining count reaches the bucket's budget, reject with 429
       and Retry-After = seconds until the oldest timestamp leaves the window
    3. Otherwise record the current timestamp and continue

The state is process-local; multiple workers each enforce their own limit.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding window rate limiter keyed by client IP and bucket."""

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[Tuple[str, str], Deque[float]] = defaultdict(deque)
        self._seen = 0

    @staticmethod
    def _budget(bucket: str) -> int:
        if bucket == "write":
            return settings.rate_limit_write_requests
        return settings.rate_limit_requests

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        bucket = "write" if request.method in WRITE_METHODS else "read"
        key = (client_ip, bucket)

        now = time.time()
        window_start = now - settings.rate_limit_window
        timestamps = self._requests[key]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        budget = self._budget(bucket)
        if len(timestamps) >= budget:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s (%s): %d requests in %ds window",
                client_ip, bucket, len(timestamps), settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after, context={"bucket": bucket})
            # Raised exceptions never reach app handlers from BaseHTTPMiddleware
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % SWEEP_EVERY == 0:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        """Forget clients with no requests inside the current window."""
        idle = [key for key, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for key in idle:
            del self._requests[key]
        if idle:
            logger.debug("Rate limiter dropped %d idle client entries", len(idle))
