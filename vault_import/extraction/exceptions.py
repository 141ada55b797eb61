class ExtractionError(Exception):
    """Raised when credential extraction from a chunk fails."""


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
