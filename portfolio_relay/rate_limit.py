"""Per-IP request limiting shared by every route of the relay."""
from __future__ import annotations

import math
import time
from typing import Callable, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from limits import RateLimitItem, parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter, RateLimiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from .settings import Settings


RATE_LIMITED_MESSAGE = "Too many requests from this IP, please try again later."
LIMIT_SCOPE = "relay"


class RelayRateLimiter:
    """One fixed-window counter per client key, shared by every path."""

    def __init__(
        self,
        limit: str,
        storage_uri: str = "memory://",
        *,
        key_func: Callable[[Request], str] = get_remote_address,
        headers_enabled: bool = True,
    ):
        self.item: RateLimitItem = parse(limit)
        self.strategy: RateLimiter = FixedWindowRateLimiter(storage_from_string(storage_uri))
        self.key_func = key_func
        self.headers_enabled = headers_enabled

    def hit(self, request: Request) -> bool:
        return self.strategy.hit(self.item, self.key_func(request), LIMIT_SCOPE)

    def headers(self, request: Request, *, limited: bool) -> Dict[str, str]:
        if not self.headers_enabled:
            return {}
        reset_time, remaining = self.strategy.get_window_stats(
            self.item, self.key_func(request), LIMIT_SCOPE
        )
        headers = {
            "X-RateLimit-Limit": str(self.item.amount),
            "X-RateLimit-Remaining": str(max(0, remaining)),
            "X-RateLimit-Reset": str(int(reset_time)),
        }
        if limited:
            headers["Retry-After"] = str(max(0, math.ceil(reset_time - time.time())))
        return headers


def build_limiter(settings: Settings) -> RelayRateLimiter:
    return RelayRateLimiter(
        settings.rate_limit,
        settings.rate_limit_storage_uri,
        headers_enabled=settings.rate_limit_headers,
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Counts every request before routing, so unknown paths are limited too."""

    def __init__(self, app: ASGIApp, limiter: RelayRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.limiter.hit(request):
            return JSONResponse(
                {"error": RATE_LIMITED_MESSAGE},
                status_code=429,
                headers=self.limiter.headers(request, limited=True),
            )

        response = await call_next(request)
        response.headers.update(self.limiter.headers(request, limited=False))
        return response
