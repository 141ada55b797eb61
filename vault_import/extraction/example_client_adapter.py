"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in ExtractorFactory.
"""

import json
from collections.abc import Iterator
from typing import ClassVar

from vault_import.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Example adapter that streams a fixed, valid extraction response.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[list[dict[str, object]]] = []

    def __init__(self, response: str | None = None, delta_size: int = 16) -> None:
        self._response = response if response is not None else json.dumps(self.DEFAULT_RESPONSE)
        self._delta_size = max(1, delta_size)

    def stream_text(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
    ) -> Iterator[str]:
        _ = model, temperature, prompt
        for start in range(0, len(self._response), self._delta_size):
            yield self._response[start:start + self._delta_size]
