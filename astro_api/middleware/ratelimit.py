import os
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

WINDOW_SECONDS = 60.0

_requests: Dict[str, Deque[float]] = defaultdict(deque)
_lock = threading.Lock()


def _client_key(request: Request) -> str:
    api_key = getattr(request.state, "api_key", None)
    if api_key:
        return f"key:{api_key}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def reset_counters() -> None:
    with _lock:
        _requests.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per API key (or client address)."""

    async def dispatch(self, request: Request, call_next):
        if os.getenv("RATE_LIMIT_ENABLED", "false").lower() != "true":
            return await call_next(request)

        limit = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
        key = _client_key(request)
        now = time.monotonic()
        with _lock:
            window = _requests[key]
            while window and window[0] <= now - WINDOW_SECONDS:
                window.popleft()
            if len(window) >= limit:
                retry_after = max(1, int(WINDOW_SECONDS - (now - window[0])))
                return JSONResponse(
                    {"detail": "Rate limit exceeded"},
                    status_code=429,
                    headers={"Retry-After": str(retry_after)},
                )
            window.append(now)

        return await call_next(request)
