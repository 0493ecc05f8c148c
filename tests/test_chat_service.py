from __future__ import annotations

import unittest
from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest import mock

import httpx
import openai
from google.api_core import exceptions as google_exceptions

from portfolio_relay.services import (
    GeminiChatService,
    OpenAIChatService,
    UpstreamRateLimitError,
    build_chat_service,
)
from portfolio_relay.services.chat_service import EMPTY_REPLY
from portfolio_relay.settings import ConfigurationError, Settings


BIO = "Sakhile Dumisa builds web applications."
OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class FakeCompletions:
    def __init__(self, result: Any = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


def completion_with(content: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def status_error(cls: type, status_code: int) -> openai.APIStatusError:
    response = httpx.Response(status_code, request=httpx.Request("POST", OPENAI_URL))
    return cls("upstream said no", response=response, body=None)


class OpenAIChatServiceTest(unittest.IsolatedAsyncioTestCase):
    def make_service(self, completions: FakeCompletions) -> OpenAIChatService:
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        return OpenAIChatService("sk-test", BIO, client=client)

    async def test_sends_bio_as_system_prompt_with_fixed_parameters(self) -> None:
        completions = FakeCompletions(result=completion_with("  Sakhile knows Python.  \n"))
        service = self.make_service(completions)

        reply = await service.generate_reply("What languages?")

        self.assertEqual(reply, "Sakhile knows Python.")
        self.assertEqual(len(completions.calls), 1)
        call = completions.calls[0]
        self.assertEqual(call["model"], "gpt-3.5-turbo")
        self.assertEqual(call["max_tokens"], 300)
        self.assertEqual(call["temperature"], 0.7)
        self.assertEqual(
            call["messages"],
            [
                {"role": "system", "content": BIO},
                {"role": "user", "content": "What languages?"},
            ],
        )

    async def test_empty_or_missing_content_uses_placeholder(self) -> None:
        for result in (completion_with("   "), completion_with(None), SimpleNamespace(choices=[])):
            with self.subTest(result=result):
                service = self.make_service(FakeCompletions(result=result))
                self.assertEqual(await service.generate_reply("hi"), EMPTY_REPLY)

    async def test_upstream_429_becomes_rate_limit_error(self) -> None:
        error = status_error(openai.RateLimitError, 429)
        service = self.make_service(FakeCompletions(error=error))

        with self.assertRaises(UpstreamRateLimitError) as ctx:
            await service.generate_reply("hi")
        self.assertIs(ctx.exception.__cause__, error)

    async def test_other_upstream_errors_propagate(self) -> None:
        error = status_error(openai.InternalServerError, 500)
        service = self.make_service(FakeCompletions(error=error))

        with self.assertRaises(openai.InternalServerError):
            await service.generate_reply("hi")

    async def test_rejects_empty_message(self) -> None:
        completions = FakeCompletions(result=completion_with("unused"))
        with self.assertRaises(ValueError):
            await self.make_service(completions).generate_reply("")
        self.assertEqual(completions.calls, [])


class GeminiChatServiceTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.service = GeminiChatService("g-key", BIO, max_tokens=120, temperature=0.2)

    async def test_returns_trimmed_model_text(self) -> None:
        with mock.patch("portfolio_relay.services.chat_service.genai") as genai:
            model = genai.GenerativeModel.return_value
            model.generate_content.return_value = SimpleNamespace(text="  Hello there. ")

            reply = await self.service.generate_reply("Who are you?")

        self.assertEqual(reply, "Hello there.")
        genai.configure.assert_called_once_with(api_key="g-key")
        genai.GenerativeModel.assert_called_once_with("gemini-2.5-flash", system_instruction=BIO)
        genai.GenerationConfig.assert_called_once_with(max_output_tokens=120, temperature=0.2)
        self.assertEqual(model.generate_content.call_args.args, ("Who are you?",))

    async def test_empty_text_uses_placeholder(self) -> None:
        with mock.patch.object(self.service, "_call_gemini", return_value=""):
            self.assertEqual(await self.service.generate_reply("hi"), EMPTY_REPLY)

    async def test_resource_exhausted_becomes_rate_limit_error(self) -> None:
        with mock.patch.object(
            self.service,
            "_call_gemini",
            side_effect=google_exceptions.ResourceExhausted("quota exceeded"),
        ):
            with self.assertRaises(UpstreamRateLimitError):
                await self.service.generate_reply("hi")

    async def test_other_failures_propagate(self) -> None:
        with mock.patch.object(self.service, "_call_gemini", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                await self.service.generate_reply("hi")


class BuildChatServiceTest(unittest.TestCase):
    def settings(self, **overrides: Any) -> Settings:
        values = {"API_KEY": "k", "OPENAI_API_KEY": "sk-test", "BIO_CONTEXT": BIO}
        values.update(overrides)
        return Settings.model_validate(values)

    def test_defaults_to_openai(self) -> None:
        service = build_chat_service(self.settings(OPENAI_MODEL="gpt-4o-mini"))
        self.assertIsInstance(service, OpenAIChatService)
        self.assertEqual(service.model_name, "gpt-4o-mini")

    def test_selects_gemini(self) -> None:
        service = build_chat_service(self.settings(LLM_PROVIDER="gemini", GEMINI_API_KEY="g"))
        self.assertIsInstance(service, GeminiChatService)
        self.assertEqual(service.bio_context, BIO)

    def test_unknown_provider(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_chat_service(self.settings(LLM_PROVIDER="llama"))


if __name__ == "__main__":
    unittest.main()
