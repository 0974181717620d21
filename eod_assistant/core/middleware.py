from collections import defaultdict
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


RATE_LIMITED_PREFIX = "/api/github"


class GitHubRateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding-window limiter for the GitHub aggregation routes.

    Each aggregation fans out to many upstream calls, so these routes are
    throttled per client to protect the shared GitHub token's quota.
    """

    def __init__(
        self, app, requests_per_window: int = 30, window_seconds: int = 60
    ) -> None:
        super().__init__(app)
        self.max_requests = max(1, requests_per_window)
        self.window_seconds = max(1, window_seconds)
        # One queue of request timestamps per client key.
        self._client_buckets: dict[str, deque[float]] = defaultdict(deque)
        self._lock = RLock()
        self._last_sweep = monotonic()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method != "GET" or not request.url.path.startswith(
            RATE_LIMITED_PREFIX
        ):
            return await call_next(request)

        client_key = self._client_ip(request)
        now = monotonic()

        with self._lock:
            cutoff = now - self.window_seconds
            if now - self._last_sweep >= self.window_seconds:
                self._drop_idle_buckets(cutoff)
                self._last_sweep = now

            bucket = self._client_buckets[client_key]
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) >= self.max_requests:
                retry_after = max(1, int(self.window_seconds - (now - bucket[0])))
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too Many Requests"},
                    headers={"Retry-After": str(retry_after)},
                )

            bucket.append(now)

        return await call_next(request)

    def _drop_idle_buckets(self, cutoff: float) -> None:
        """Forget clients whose newest request is older than the window."""

        for client_key in list(self._client_buckets):
            bucket = self._client_buckets[client_key]
            if not bucket or bucket[-1] <= cutoff:
                del self._client_buckets[client_key]

    @staticmethod
    def _client_ip(request: Request) -> str:
        # Reverse proxies set X-Forwarded-For; the first hop is the client.
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip() or "unknown"

        if request.client and request.client.host:
            return request.client.host

        return "unknown"
