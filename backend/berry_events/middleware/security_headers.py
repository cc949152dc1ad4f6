"""Middleware to add common security headers to responses."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach recommended security headers to every HTTP response.

    Cart and order responses carry personal booking data, so they are also
    marked uncacheable.
    """

    def __init__(self, app: ASGIApp, private_prefixes: tuple[str, ...] | None = None) -> None:
        super().__init__(app)
        api = settings.API_V1_STR.rstrip("/")
        self.private_prefixes = private_prefixes or (f"{api}/cart", f"{api}/orders")

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'self'")
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=63072000; includeSubDomains"
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        if request.url.path.startswith(self.private_prefixes):
            response.headers["Cache-Control"] = "no-store"
        return response
