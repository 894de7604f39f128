"""LLM adapters for summary generation.

Provides a base interface and concrete adapters for OpenAI-compatible
chat-completion APIs (OpenAI, Perplexity), Google's Gemini API, and a
deterministic mock for testing.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

PERPLEXITY_BASE_URL = "https://api.perplexity.ai"


class LLMConfigurationError(RuntimeError):
    """Raised when an adapter cannot be built, e.g. the API key is missing."""


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    name: str = "base"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string response from the model.
        """


class ChatCompletionLLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Works against OpenAI directly or any compatible endpoint (Perplexity)
    through ``base_url``. Single non-streaming call per prompt.
    """

    name = "chat_completion"

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the chat-completion adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.

        Raises:
            LLMConfigurationError: If no API key is available.
        """
        from openai import OpenAI

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        if not resolved_key:
            raise LLMConfigurationError("No API key configured for chat-completion adapter.")

        client_kwargs: dict = {"api_key": resolved_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> str:
        """Call the chat completion API.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw string content from the model response.
        """
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
            max_tokens=self._max_tokens,
            stream=False,
        )
        return response.choices[0].message.content or ""


class GeminiLLMAdapter(BaseLLMAdapter):
    """Adapter for Google's generative-content API via ``google-genai``."""

    name = "gemini"

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
    ) -> None:
        """Initialise the Gemini adapter.

        Args:
            model: Gemini model identifier.
            max_tokens: Maximum output tokens.
            api_key: API key. Falls back to GEMINI_API_KEY env var.

        Raises:
            LLMConfigurationError: If no API key is available.
        """
        from google import genai

        resolved_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        if not resolved_key:
            raise LLMConfigurationError("No API key configured for Gemini adapter.")

        self._client = genai.Client(api_key=resolved_key)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> str:
        """Call ``models.generate_content`` and return the response text."""
        from google.genai import types

        response = self._client.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=0.2,
                max_output_tokens=self._max_tokens,
            ),
        )
        return response.text or ""


_MOCK_RESPONSE = (
    "Mock summary for testing purposes. Reports were reviewed and no "
    "external model was called."
)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed response.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    name = "mock"

    def __init__(self, response: str = _MOCK_RESPONSE) -> None:
        self._response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        """Record the prompt and return the fixed response."""
        self.prompts.append(prompt)
        return self._response
