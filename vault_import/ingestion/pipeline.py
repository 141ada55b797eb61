"""Import pipeline: chunk -> extract -> validate -> persist, with progress events.

States: idle -> processing(chunk) -> extraction complete -> saving(record) ->
complete. A fatal error from any state emits one ``error`` event and re-raises.
Chunks and records are handled strictly in order, one at a time.
"""

from collections.abc import Callable

from vault_import.config.settings import Settings
from vault_import.crypto.cipher import EnvelopeCipher
from vault_import.database.repositories.credentials_repository import CredentialsRepository
from vault_import.extraction.base import BaseExtractor
from vault_import.extraction.factory import ExtractorFactory
from vault_import.ingestion.chunker import DEFAULT_MAX_CHUNK_CHARS, split_into_chunks
from vault_import.ingestion.csv_parser import parse_csv
from vault_import.ingestion.exceptions import (
    EmptyInputError,
    NoCredentialsFoundError,
    UnsupportedSourceKindError,
)
from vault_import.ingestion.models import (
    ERROR,
    PROCESSING_COMPLETE,
    PROGRESS,
    SOURCE_KINDS,
    SUCCESS,
    CredentialRecord,
    ImportResult,
    ProgressEvent,
)
from vault_import.ingestion.persister import Persister
from vault_import.logging.logger import Log

ProgressCallback = Callable[[ProgressEvent], None]

NO_CREDENTIALS_MESSAGE = "No credentials found in the file"


def _ignore(_event: ProgressEvent) -> None:
    return None


class ImportPipeline:
    """Orchestrates one import run for one owner."""

    def __init__(
        self,
        *,
        extractor: BaseExtractor,
        persister: Persister,
        cipher: EnvelopeCipher,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
        prefer_direct_csv_parse: bool = False,
    ) -> None:
        self._extractor = extractor
        self._persister = persister
        self._cipher = cipher
        self._max_chunk_chars = max_chunk_chars
        self._prefer_direct_csv_parse = prefer_direct_csv_parse

    def run(
        self,
        content: str,
        source_kind: str,
        owner_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        """Run the full import and return the accumulated result.

        Raises:
            NoCredentialsFoundError: if extraction yields no valid records.
            CipherConfigurationError: if the master secret is missing.
            StoreUnavailableError: if the store is unreachable before saving.
            UnsupportedSourceKindError: for an unknown *source_kind*.
        """
        emit = on_progress or _ignore
        try:
            Log.info(f"Starting {source_kind} import for owner {owner_id} ({len(content)} chars)")
            self._cipher.ensure_configured()
            if source_kind not in SOURCE_KINDS:
                raise UnsupportedSourceKindError(f"Unsupported file type: {source_kind}")

            records = self._extract_records(content, source_kind, emit)
            result = ImportResult(records=records, total_processed=len(records))

            if not records:
                Log.warning(f"Import for owner {owner_id} found no credentials")
                emit(
                    ProgressEvent(
                        ERROR,
                        {"message": NO_CREDENTIALS_MESSAGE, "result": result.to_dict()},
                    )
                )
                raise NoCredentialsFoundError(NO_CREDENTIALS_MESSAGE)

            emit(
                ProgressEvent(
                    PROCESSING_COMPLETE,
                    {
                        "message": "AI processing complete, saving credentials...",
                        "result": result.to_dict(),
                    },
                )
            )

            saved = self._persister.save_all(records, owner_id, emit)
            result.success_count = len(saved.saved)
            result.error_count = len(saved.errors)
            result.errors = list(saved.errors)

            payload: dict[str, object] = {
                "message": f"Successfully imported {len(saved.saved)} credentials",
                "savedCount": len(saved.saved),
                "result": result.to_dict(),
                "credentials": [credential.to_dict() for credential in saved.saved],
            }
            if saved.errors:
                payload["errors"] = list(saved.errors)
            emit(ProgressEvent(SUCCESS, payload))

            Log.info(
                f"Import for owner {owner_id} complete: {result.success_count} saved, "
                f"{result.error_count} failed"
            )
            return result
        except NoCredentialsFoundError:
            raise
        except Exception as exc:
            Log.exception(f"Import failed for owner {owner_id}: {exc}")
            emit(ProgressEvent(ERROR, {"message": f"Import failed: {exc}"}))
            raise

    def _extract_records(
        self,
        content: str,
        source_kind: str,
        emit: ProgressCallback,
    ) -> list[CredentialRecord]:
        if source_kind == "csv" and self._prefer_direct_csv_parse:
            records = self._parse_csv_directly(content, emit)
            if records:
                return records
            Log.info("Direct CSV parsing found nothing, falling back to AI extraction")
        return self._extract_with_ai(content, emit)

    def _parse_csv_directly(
        self,
        content: str,
        emit: ProgressCallback,
    ) -> list[CredentialRecord]:
        try:
            records = parse_csv(content)
        except EmptyInputError as exc:
            Log.warning(f"Direct CSV parsing failed: {exc}")
            return []
        if records:
            emit(_progress(1, 1, len(content), len(records), "processing", "Parsed CSV directly"))
            emit(
                _progress(
                    1, 1, 0, len(records), "complete",
                    f"CSV parsing complete. Total credentials found: {len(records)}",
                )
            )
        return records

    def _extract_with_ai(
        self,
        content: str,
        emit: ProgressCallback,
    ) -> list[CredentialRecord]:
        chunks = split_into_chunks(content, self._max_chunk_chars)
        total = len(chunks)
        records: list[CredentialRecord] = []

        emit(_progress(0, total, 0, 0, "processing", f"Starting AI processing of {total} chunks..."))

        for chunk in chunks:
            index = chunk.sequence_index + 1
            emit(
                _progress(
                    index, total, chunk.size_chars, len(records), "processing",
                    f"Processing chunk {index}/{total} ({chunk.size_chars} chars)...",
                )
            )
            try:
                records.extend(self._extractor.extract(chunk, index, total))
            except Exception as exc:
                Log.error(f"Extraction failed for chunk {index}/{total}, skipping: {exc}")
            emit(
                _progress(
                    index, total, chunk.size_chars, len(records), "processing",
                    f"Completed chunk {index}/{total}. Total credentials found: {len(records)}",
                )
            )

        emit(
            _progress(
                total, total, 0, len(records), "complete",
                f"AI processing complete. Total credentials extracted: {len(records)}",
            )
        )
        return records


def _progress(
    current_chunk: int,
    total_chunks: int,
    chunk_size: int,
    total_processed: int,
    status: str,
    message: str,
) -> ProgressEvent:
    return ProgressEvent(
        PROGRESS,
        {
            "currentChunk": current_chunk,
            "totalChunks": total_chunks,
            "currentChunkSize": chunk_size,
            "totalProcessed": total_processed,
            "status": status,
            "message": message,
        },
    )


def build_pipeline(settings: Settings, repo: CredentialsRepository | None = None) -> ImportPipeline:
    """Build an ImportPipeline with all required adapters."""
    cipher = EnvelopeCipher(settings.master_password)
    persister = Persister(cipher=cipher, repo=repo if repo is not None else CredentialsRepository())
    return ImportPipeline(
        extractor=ExtractorFactory.create(settings),
        persister=persister,
        cipher=cipher,
        max_chunk_chars=settings.max_chunk_chars,
        prefer_direct_csv_parse=settings.prefer_direct_csv_parse,
    )
