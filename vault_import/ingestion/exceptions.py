class IngestionError(Exception):
    """Base exception for all import-related errors."""


class EmptyInputError(IngestionError):
    """Raised when an upload or CSV body has no usable content."""


class FileTooLargeError(IngestionError):
    """Raised when an upload exceeds the configured size limit."""


class UnsupportedFileTypeError(IngestionError):
    """Raised when an upload has an extension the importer does not accept."""


class UnsupportedSourceKindError(IngestionError):
    """Raised when the pipeline is asked to run on an unknown source kind."""


class NoCredentialsFoundError(IngestionError):
    """Raised when extraction finishes without a single valid record."""


class StoreUnavailableError(IngestionError):
    """Raised when the record store cannot be reached before saving begins."""
