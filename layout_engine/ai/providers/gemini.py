"""Gemini model client using the google-genai SDK."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, TypeVar

from google import genai
from google.genai import types

from layout_engine.ai.providers.base import AIModel, ModelResponse, SimpleModelResponse

DEFAULT_MODEL = "gemini-2.0-flash"
_RATE_LIMIT_RETRIES = 3
_BACKOFF_BASE_DELAY = 1.0

T = TypeVar("T")


def _generation_config() -> types.GenerateContentConfig:
  return types.GenerateContentConfig(temperature=1.0, top_p=0.95, top_k=40, max_output_tokens=8192, response_mime_type="text/plain")


class GeminiModel(AIModel):
  """Gemini model client that streams a single user-role prompt."""

  def __init__(self, name: str = DEFAULT_MODEL, api_key: str | None = None, *, client: Any | None = None) -> None:
    self.name: str = name

    if client is None:
      if not api_key:
        raise ValueError("GEMINI_API_KEY environment variable is required")
      client = genai.Client(api_key=api_key)

    self._client = client

  async def generate(self, prompt: str) -> ModelResponse:
    """Generate a text response, concatenating every streamed chunk."""
    logger = logging.getLogger("layout_engine.ai.providers.gemini")

    # Use the async client to avoid blocking the asyncio event loop.
    content, usage = await _with_backoff(self._stream_text, prompt)

    logger.debug("Gemini response:\n%s", content)
    return SimpleModelResponse(content=content, usage=usage)

  async def _stream_text(self, prompt: str) -> tuple[str, dict[str, int] | None]:
    contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]
    stream = await self._client.aio.models.generate_content_stream(model=self.name, contents=contents, config=_generation_config())

    parts: list[str] = []
    usage = None
    async for chunk in stream:
      text = chunk.text
      if text:
        parts.append(text)

      # Usage totals arrive on the final chunk.
      if chunk.usage_metadata:
        usage = {"prompt_tokens": chunk.usage_metadata.prompt_token_count, "completion_tokens": chunk.usage_metadata.candidates_token_count, "total_tokens": chunk.usage_metadata.total_token_count}

    return "".join(parts), usage


@lru_cache(maxsize=4)
def get_layout_model(api_key: str | None, model_name: str | None = None) -> GeminiModel:
  """Return the Gemini model used for course layouts."""
  return GeminiModel(model_name or DEFAULT_MODEL, api_key=api_key)


async def _with_backoff(func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
  """Retry `func` on rate limiting with jittered exponential backoff; other errors propagate."""
  attempt = 0
  while True:
    try:
      return await func(*args, **kwargs)
    except Exception as e:
      # Check for 429
      if "429" not in str(e) and "Too Many Requests" not in str(e):
        raise
      attempt += 1
      if attempt >= _RATE_LIMIT_RETRIES:
        raise
      delay = _BACKOFF_BASE_DELAY * (2 ** (attempt - 1)) + random.uniform(0, 1)
      await asyncio.sleep(delay)
