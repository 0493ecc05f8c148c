from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable failure reason.")


class HealthResponse(BaseModel):
    status: str = Field(default="OK", description="Liveness indicator.")
    message: str = Field(default="API is running!", description="Liveness message.")
