from __future__ import annotations

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    message: str = Field(
        ..., min_length=1, strict=True, description="Visitor question forwarded to the model."
    )


class AskResponse(BaseModel):
    response: str = Field(..., description="Model-generated answer.")
