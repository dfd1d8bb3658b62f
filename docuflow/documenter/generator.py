# docuflow/documenter/generator.py

from __future__ import annotations
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from openai import AsyncOpenAI

from docuflow.config import Settings
from docuflow.errors import AIServiceError, ConfigError
from docuflow.utils.logger import get_logger

log = get_logger("generator")

SYSTEM_MESSAGE = (
    "You write concise technical documentation for n8n automation workflows. "
    "You always answer with a single raw JSON object and nothing else."
)


@runtime_checkable
class TextGenerator(Protocol):
    """Single-shot text generation: prompt in, untyped text out."""

    async def generate(self, prompt: str) -> str:
        ...


def _client_kwargs(settings: Settings) -> Dict[str, Any]:
    if not settings.api_key:
        raise ConfigError("OPENAI_API_KEY is not set (needed to document workflows)")
    kwargs: Dict[str, Any] = {"api_key": settings.api_key}
    if settings.organization:
        kwargs["organization"] = settings.organization
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    return kwargs


class OpenAIGenerator:
    """
    Chat-completions adapter for OpenAI or any OpenAI-compatible endpoint
    (set OPENAI_BASE_URL). One request per `generate` call, no retries.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.model
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        self._client = client if client is not None else AsyncOpenAI(
            max_retries=0, **_client_kwargs(settings)
        )

    async def generate(self, prompt: str) -> str:
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            log.warning("text generation request failed (%s): %s", self.model, e)
            raise AIServiceError(f"{self.model} request failed: {e}") from e

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIServiceError(f"{self.model} response malformed: {e!r}") from e
        if not content or not content.strip():
            raise AIServiceError(f"{self.model} returned an empty response")
        return content

    async def aclose(self) -> None:
        """Release the HTTP connection pool of the underlying client."""
        await self._client.close()
