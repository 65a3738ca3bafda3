import os
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Paths served without an API key
PUBLIC_PATHS = {"/", "/__health", "/docs", "/openapi.json"}


def _configured_keys() -> set:
    return {key.strip() for key in os.getenv("API_KEYS", "").split(",") if key.strip()}


def _request_key(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):].strip()
    return request.headers.get("X-API-Key", "").strip()


class APIKeyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        if os.getenv("AUTH_ENABLED", "false").lower() != "true":
            return await call_next(request)

        token = _request_key(request)
        if not token:
            return JSONResponse({"detail": "Missing API key"}, status_code=401)
        if token not in _configured_keys():
            return JSONResponse({"detail": "Invalid API key"}, status_code=403)

        request.state.api_key = token
        return await call_next(request)
