from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from ..settings import ConfigurationError, Settings


API_KEY_HEADER = "X-API-Key"


class ApiKeyAuthService:
    """Checks the static service key clients present in the X-API-Key header."""

    def __init__(self, settings: Settings):
        self.api_key = (settings.api_key or "").strip()

        if not self.api_key:
            raise ConfigurationError("API_KEY must be configured before serving requests.")

    def verify(self, supplied: Optional[str]) -> None:
        if not supplied:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"API key required. Please provide an {API_KEY_HEADER} header.",
            )
        if not secrets.compare_digest(supplied.encode("utf-8"), self.api_key.encode("utf-8")):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid API key.",
            )

    def build_auth_dependency(self):
        async def dependency(
            api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER)
        ) -> None:
            self.verify(api_key)

        return dependency
