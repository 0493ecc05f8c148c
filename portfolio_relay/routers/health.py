from __future__ import annotations

from fastapi import APIRouter

from ..schemas import HealthResponse


HEALTH_METHODS = ["GET", "HEAD"]


def build_health_router() -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.api_route("/", methods=HEALTH_METHODS, response_model=HealthResponse, summary="Liveness check.")
    async def root() -> HealthResponse:
        return HealthResponse()

    @router.api_route(
        "/health", methods=HEALTH_METHODS, response_model=HealthResponse, summary="Liveness check."
    )
    async def healthcheck() -> HealthResponse:
        return HealthResponse()

    return router
