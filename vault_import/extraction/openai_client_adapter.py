from collections.abc import Iterator

import httpx
import openai

from vault_import.extraction.client_base import BaseExtractionClient
from vault_import.extraction.exceptions import ExtractionNetworkError


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction client adapter built on the OpenAI-compatible streaming chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def stream_text(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
    ) -> Iterator[str]:
        try:
            stream = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                stream=True,
                messages=[{"role": "user", "content": prompt}],
            )
            for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta.content
                if delta:
                    yield delta
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(
                f"AI provider API error: {exc}"
            ) from exc
