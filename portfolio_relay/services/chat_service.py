from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import google.generativeai as genai
import openai
from google.api_core import exceptions as google_exceptions

from ..settings import ConfigurationError, Settings


logger = logging.getLogger("portfolio-relay.chat")

EMPTY_REPLY = "I don't have an answer for that."


class UpstreamRateLimitError(RuntimeError):
    """The completion provider rejected the call because of its own rate limit."""


class ChatService(Protocol):
    model_name: str

    async def generate_reply(self, message: str) -> str:
        ...


class OpenAIChatService:
    """Answers a visitor message with one OpenAI chat completion call."""

    def __init__(
        self,
        api_key: Optional[str],
        bio_context: str,
        *,
        model_name: str = "gpt-3.5-turbo",
        max_tokens: int = 300,
        temperature: float = 0.7,
        client: Optional[Any] = None,
    ):
        self.bio_context = bio_context
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or openai.AsyncOpenAI(api_key=api_key)

    async def generate_reply(self, message: str) -> str:
        if not message:
            raise ValueError("Message must be a non-empty string.")

        try:
            completion = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": self.bio_context},
                    {"role": "user", "content": message},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.APIStatusError as exc:
            if exc.status_code == 429:
                raise UpstreamRateLimitError(str(exc)) from exc
            raise

        return _first_choice_text(completion) or EMPTY_REPLY


class GeminiChatService:
    """Same contract as OpenAIChatService, backed by Google Gemini."""

    def __init__(
        self,
        api_key: Optional[str],
        bio_context: str,
        *,
        model_name: str = "gemini-2.5-flash",
        max_tokens: int = 300,
        temperature: float = 0.7,
    ):
        self.api_key = api_key
        self.bio_context = bio_context
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate_reply(self, message: str) -> str:
        if not message:
            raise ValueError("Message must be a non-empty string.")

        try:
            response_text = await asyncio.to_thread(self._call_gemini, message)
        except google_exceptions.ResourceExhausted as exc:
            raise UpstreamRateLimitError(str(exc)) from exc

        return response_text or EMPTY_REPLY

    def _call_gemini(self, message: str) -> str:
        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model_name, system_instruction=self.bio_context)
        response: Any = model.generate_content(
            message,
            generation_config=genai.GenerationConfig(
                max_output_tokens=self.max_tokens,
                temperature=self.temperature,
            ),
        )
        try:
            text = response.text
        except ValueError:
            # raised by the SDK when the candidate carries no text parts
            text = None
        if text:
            return text.strip()

        candidates = getattr(response, "candidates", None) or []
        for candidate in candidates:
            parts = getattr(candidate, "content", None)
            if not parts:
                continue
            for part in getattr(parts, "parts", []):
                text = getattr(part, "text", None)
                if text and text.strip():
                    return text.strip()

        return ""


def _first_choice_text(completion: Any) -> str:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content.strip() if content else ""


def build_chat_service(settings: Settings) -> ChatService:
    """Instantiate the completion service selected by LLM_PROVIDER."""
    bio_context = settings.bio_context or ""
    if settings.provider == "openai":
        return OpenAIChatService(
            settings.openai_api_key,
            bio_context,
            model_name=settings.openai_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
    if settings.provider == "gemini":
        return GeminiChatService(
            settings.gemini_api_key,
            bio_context,
            model_name=settings.gemini_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
    raise ConfigurationError(f"Unsupported LLM_PROVIDER '{settings.llm_provider}'.")
