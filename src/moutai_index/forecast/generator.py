"""External generation call — one grounded, schema-constrained LLM request.

Each generator returns the raw response text plus the grounding chunks the
provider attached to the response, in the shape ``{"web": {"title", "uri"}}``.
Nothing here validates the text; that is the normalizer's job.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Protocol

import anthropic
from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

API_KEY_ENV = "LLM_API_KEY"
ANTHROPIC_MAX_TOKENS = 8192
ANTHROPIC_MAX_SEARCHES = 5


@dataclass(frozen=True)
class Generation:
    """Raw text and grounding metadata from one generation call."""

    text: str
    grounding_chunks: list[dict] = field(default_factory=list)


class Generator(Protocol):
    def generate(self, prompt: str, schema: dict) -> Generation: ...


class MissingApiKeyError(RuntimeError):
    """No API key in the environment at call time."""


def _api_key() -> str:
    """Read the API key from the environment at call time."""
    key = os.environ.get(API_KEY_ENV)
    if not key:
        raise MissingApiKeyError(f"{API_KEY_ENV} is not set")
    return key


class GeminiGenerator:
    """google-genai client with Google Search grounding and a JSON response schema."""

    def __init__(self, *, model: str, temperature: float = 0.0, timeout: int = 120) -> None:
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def generate(self, prompt: str, schema: dict) -> Generation:
        client = genai.Client(
            api_key=_api_key(),
            http_options=types.HttpOptions(timeout=self.timeout * 1000),
        )
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return Generation(
            text=response.text or "{}",
            grounding_chunks=_gemini_chunks(response),
        )


def _gemini_chunks(response) -> list[dict]:
    """Flatten candidates[0].grounding_metadata.grounding_chunks into plain dicts."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    result: list[dict] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            result.append({})
            continue
        result.append({"web": {"title": web.title, "uri": web.uri}})
    return result


class AnthropicGenerator:
    """Anthropic Messages API with the server-side web search tool.

    The Messages API has no response-schema parameter, so the schema is
    appended to the prompt and the text blocks are joined back together.
    """

    def __init__(self, *, model: str, temperature: float = 0.0, timeout: int = 120) -> None:
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def generate(self, prompt: str, schema: dict) -> Generation:
        client = anthropic.Anthropic(
            api_key=_api_key(),
            max_retries=0,
            timeout=self.timeout,
        )
        message = client.messages.create(
            model=self.model,
            max_tokens=ANTHROPIC_MAX_TOKENS,
            temperature=self.temperature,
            tools=[{
                "type": "web_search_20250305",
                "name": "web_search",
                "max_uses": ANTHROPIC_MAX_SEARCHES,
            }],
            messages=[{
                "role": "user",
                "content": f"{prompt}\n\nJSON schema:\n{json.dumps(schema, indent=2)}",
            }],
        )
        texts: list[str] = []
        chunks: list[dict] = []
        for block in message.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "web_search_tool_result":
                # only the text after the last search result is the answer
                texts = []
                if isinstance(block.content, list):
                    for result in block.content:
                        chunks.append({"web": {"title": result.title, "uri": result.url}})
        return Generation(text="".join(texts).strip() or "{}", grounding_chunks=chunks)


def create_generator(provider: str, *, model: str, temperature: float, timeout: int) -> Generator:
    """Build the generator for the configured provider."""
    if provider == "gemini":
        return GeminiGenerator(model=model, temperature=temperature, timeout=timeout)
    if provider == "anthropic":
        return AnthropicGenerator(model=model, temperature=temperature, timeout=timeout)
    raise ValueError(f"Unknown LLM provider '{provider}'")
