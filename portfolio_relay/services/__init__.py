from .auth_service import ApiKeyAuthService
from .chat_service import (
    ChatService,
    GeminiChatService,
    OpenAIChatService,
    UpstreamRateLimitError,
    build_chat_service,
)

__all__ = [
    "ApiKeyAuthService",
    "ChatService",
    "GeminiChatService",
    "OpenAIChatService",
    "UpstreamRateLimitError",
    "build_chat_service",
]
