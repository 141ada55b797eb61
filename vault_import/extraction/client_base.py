from abc import ABC, abstractmethod
from collections.abc import Iterator


class BaseExtractionClient(ABC):
    """Contract for provider-specific text-generation clients."""

    @abstractmethod
    def stream_text(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
    ) -> Iterator[str]:
        """Yield response text deltas in the order the provider produces them."""
