from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas import AskRequest, AskResponse, ErrorResponse
from ..services import ChatService, UpstreamRateLimitError


logger = logging.getLogger("portfolio-relay.ask")

UPSTREAM_BUSY_MESSAGE = "The AI service is busy. Please try again later."
INTERNAL_ERROR_MESSAGE = "An internal server error occurred."


def build_ask_router(chat_service: ChatService, auth_dependency: Callable) -> APIRouter:
    """Create the /ask-ai router wired to the provided chat service."""
    router = APIRouter(tags=["ask"])

    @router.post(
        "/ask-ai",
        response_model=AskResponse,
        dependencies=[Depends(auth_dependency)],
        summary="Answer a visitor question about the portfolio owner.",
        responses={
            status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
            status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
            status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
            status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
            status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
        },
    )
    async def ask_ai(payload: AskRequest) -> AskResponse:
        try:
            reply = await chat_service.generate_reply(payload.message)
        except UpstreamRateLimitError as exc:
            logger.warning("Upstream model rate-limited the request: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=UPSTREAM_BUSY_MESSAGE,
            ) from exc
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Error in /ask-ai")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=INTERNAL_ERROR_MESSAGE,
            ) from exc

        return AskResponse(response=reply)

    return router
