"""AI-powered credential extractor."""

import json
from pathlib import Path
from typing import Any

from vault_import.extraction.base import BaseExtractor
from vault_import.extraction.client_base import BaseExtractionClient
from vault_import.extraction.prompt_loader import load_prompt_template
from vault_import.ingestion.models import Chunk, CredentialRecord
from vault_import.ingestion.validator import normalize_candidates
from vault_import.logging.logger import Log

OUTPUT_SHAPE = json.dumps(
    [
        {
            "name": "Service/Website Name",
            "username": "username or login",
            "email": "email address if present",
            "password": "password",
            "website": "website URL if present",
            "description": "any additional notes or description",
        }
    ],
    indent=2,
)

_PREVIEW_CHARS = 200


class Extractor(BaseExtractor):
    """Extracts credential records from text chunks using a streaming AI provider."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.0,
        prompt_template_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._prompt_template = load_prompt_template(prompt_template_path)

    def extract(
        self,
        chunk: Chunk,
        chunk_index: int,
        total_chunks: int,
    ) -> list[CredentialRecord]:
        """Extract validated credential records from one chunk."""
        prompt = self._build_prompt(chunk, chunk_index, total_chunks)
        Log.info(f"Sending chunk {chunk_index}/{total_chunks} to AI ({chunk.size_chars} chars)")

        raw_response = self._collect_response(prompt)
        Log.debug(
            f"AI response for chunk {chunk_index} ({len(raw_response)} chars): "
            f"{raw_response[:_PREVIEW_CHARS]}"
        )

        candidates = self._parse_candidates(raw_response, chunk_index)
        if candidates is None:
            return []

        records = normalize_candidates(candidates)
        Log.info(
            f"Chunk {chunk_index}/{total_chunks}: {len(records)} of "
            f"{len(candidates)} candidates passed validation"
        )
        return records

    def _build_prompt(self, chunk: Chunk, chunk_index: int, total_chunks: int) -> str:
        return self._prompt_template.format(
            chunk_text=chunk.text,
            chunk_index=chunk_index,
            total_chunks=total_chunks,
            output_shape=OUTPUT_SHAPE,
        )

    def _collect_response(self, prompt: str) -> str:
        deltas = self._client.stream_text(
            model=self._model,
            temperature=self._temperature,
            prompt=prompt,
        )
        return "".join(deltas).strip()

    @staticmethod
    def _parse_candidates(raw: str, chunk_index: int) -> list[Any] | None:
        start = raw.find("[")
        end = raw.rfind("]")
        if start == -1 or end == -1 or end < start:
            Log.warning(f"No JSON array found in chunk {chunk_index}, skipping")
            return None

        try:
            parsed = json.loads(raw[start:end + 1])
        except json.JSONDecodeError as exc:
            Log.warning(f"Failed to parse AI JSON for chunk {chunk_index}: {exc}")
            return None

        if not isinstance(parsed, list):
            Log.warning(f"Parsed data is not an array for chunk {chunk_index}, skipping")
            return None
        return parsed
