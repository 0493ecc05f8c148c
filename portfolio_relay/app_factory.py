from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .cors import RelayCORSMiddleware
from .rate_limit import RateLimitMiddleware, build_limiter
from .routers import build_ask_router, build_fallback_router, build_health_router
from .services import ApiKeyAuthService, ChatService, build_chat_service
from .settings import Settings


logger = logging.getLogger("portfolio-relay")

INVALID_MESSAGE = 'Valid "message" string is required.'


def create_app(settings: Settings, chat_service: Optional[ChatService] = None) -> FastAPI:
    """Assemble the relay: CORS, rate limiting, body parsing, key check, routes."""
    app = FastAPI(
        title="Portfolio AI Relay",
        version=__version__,
        description="Answers visitor questions about the portfolio owner via an LLM.",
    )

    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)

    # Starlette runs the last-added middleware first: CORS, then the limiter.
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    origins = settings.allowed_origins
    if origins:
        app.add_middleware(
            RelayCORSMiddleware,
            allow_origins=origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.warning(
            "CLIENT_PORTFOLIO_URL is not set; no cross-origin requests will be allowed."
        )

    chat_service = chat_service or build_chat_service(settings)
    auth_service = ApiKeyAuthService(settings)

    app.include_router(build_health_router())
    app.include_router(build_ask_router(chat_service, auth_service.build_auth_dependency()))
    app.include_router(build_fallback_router())

    return app


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse({"error": INVALID_MESSAGE}, status_code=status.HTTP_400_BAD_REQUEST)
