from .chat import AskRequest, AskResponse
from .common import ErrorResponse, HealthResponse

__all__ = [
    "AskRequest",
    "AskResponse",
    "ErrorResponse",
    "HealthResponse",
]
