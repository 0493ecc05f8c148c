from __future__ import annotations

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response


class RelayCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose rejected preflights use the {error} envelope."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code < 400:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in ("content-length", "content-type")
        }
        return JSONResponse(
            {"error": response.body.decode("utf-8")},
            status_code=response.status_code,
            headers=headers,
        )
