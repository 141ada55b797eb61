import base64
from pathlib import PurePath

from vault_import.ingestion.exceptions import (
    EmptyInputError,
    FileTooLargeError,
    UnsupportedFileTypeError,
)
from vault_import.ingestion.models import SOURCE_KINDS, RawContent

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp"})
TEXT_EXTENSIONS = frozenset({".txt", ".md"})
ALLOWED_EXTENSIONS = frozenset({".csv", ".pdf"}) | IMAGE_EXTENSIONS | TEXT_EXTENSIONS


def detect_source_kind(file_name: str, declared_type: str | None = None) -> str:
    """Pick the source kind from the declared type, falling back to the extension."""
    declared = (declared_type or "").strip().lower()
    if declared in SOURCE_KINDS:
        return declared
    suffix = PurePath(file_name).suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix == ".pdf":
        return "pdf"
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    return "text"


class UploadLoader:
    """Validates an uploaded file and reduces it to text for the pipeline.

    PDFs are read as text and images are base64-encoded; the model is left to
    make sense of either.
    """

    DEFAULT_MAX_BYTES = 10 * 1024 * 1024

    def __init__(self, max_bytes: int | None = None) -> None:
        self._max_bytes = max_bytes if max_bytes is not None else self.DEFAULT_MAX_BYTES

    def load(
        self,
        file_name: str,
        data: bytes,
        declared_type: str | None = None,
    ) -> RawContent:
        """Turn upload bytes into RawContent.

        Raises:
            EmptyInputError: if the upload has no content.
            FileTooLargeError: if the upload exceeds the size limit.
            UnsupportedFileTypeError: if the extension is not accepted.
        """
        self.validate(file_name, len(data))
        source_kind = detect_source_kind(file_name, declared_type)
        if source_kind == "image":
            encoded = base64.b64encode(data).decode("ascii")
            text = f"Image file: {file_name}\nBase64 data: {encoded}"
        else:
            text = data.decode("utf-8", errors="replace")
        if not text.strip():
            raise EmptyInputError(f"File {file_name!r} contains no text")
        return RawContent(text=text, source_kind=source_kind, file_name=file_name)

    def check_size(self, size_bytes: int) -> None:
        """Raise FileTooLargeError once *size_bytes* passes the upload limit."""
        if size_bytes <= self._max_bytes:
            return
        if self._max_bytes >= 1024 * 1024:
            limit = f"{self._max_bytes // (1024 * 1024)}MB"
        else:
            limit = f"{self._max_bytes} bytes"
        raise FileTooLargeError(f"File size must be less than {limit}")

    def validate(self, file_name: str, size_bytes: int) -> None:
        if size_bytes == 0:
            raise EmptyInputError(f"File {file_name!r} is empty")
        self.check_size(size_bytes)
        suffix = PurePath(file_name).suffix.lower()
        if suffix not in ALLOWED_EXTENSIONS:
            raise UnsupportedFileTypeError(
                "Please select a valid file type "
                "(CSV, PDF, JPG, PNG, GIF, BMP, TXT, or MD)"
            )
