from __future__ import annotations

from fastapi import APIRouter, HTTPException, status


NOT_FOUND_MESSAGE = "Endpoint not found."
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def build_fallback_router() -> APIRouter:
    """Catch-all answering 404 for anything the other routers do not serve.

    Must be included last: it matches every path and method.
    """
    router = APIRouter()

    @router.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def not_found(full_path: str) -> None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)

    return router
