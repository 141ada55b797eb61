from abc import ABC, abstractmethod

from vault_import.ingestion.models import Chunk, CredentialRecord


class BaseExtractor(ABC):
    """Contract for all credential extraction adapters."""

    @abstractmethod
    def extract(
        self,
        chunk: Chunk,
        chunk_index: int,
        total_chunks: int,
    ) -> list[CredentialRecord]:
        """Extract validated credential records from one chunk of text.

        Args:
            chunk: The chunk to analyze.
            chunk_index: 1-based position of the chunk in the run.
            total_chunks: Number of chunks in the run.

        Returns:
            Zero or more validated records. Unparseable model output yields
            an empty list rather than an error.

        Raises:
            ExtractionError: when the model call itself fails.
        """
