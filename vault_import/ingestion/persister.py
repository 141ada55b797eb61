from collections.abc import Callable

from vault_import.crypto.cipher import EnvelopeCipher
from vault_import.crypto.exceptions import CipherConfigurationError
from vault_import.database.repositories.credentials_repository import CredentialsRepository
from vault_import.ingestion.exceptions import StoreUnavailableError
from vault_import.ingestion.models import (
    SAVING_PROGRESS,
    CredentialRecord,
    ProgressEvent,
    SaveResult,
    StoredCredential,
)
from vault_import.logging.logger import Log

ProgressCallback = Callable[[ProgressEvent], None]


class Persister:
    """Encrypts and stores records one at a time, tolerating per-record failures."""

    def __init__(self, cipher: EnvelopeCipher, repo: CredentialsRepository) -> None:
        self._cipher = cipher
        self._repo = repo

    def save_all(
        self,
        records: list[CredentialRecord],
        owner_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> SaveResult:
        """Persist *records* in order for *owner_id*.

        A failed write is recorded in ``SaveResult.errors`` and the batch
        continues. A ``saving_progress`` event follows every attempt.

        Raises:
            StoreUnavailableError: if the store cannot be reached before the first write.
            CipherConfigurationError: if the master secret is missing.
        """
        self._cipher.ensure_configured()
        self._check_store()

        result = SaveResult()
        total = len(records)
        for index, record in enumerate(records, start=1):
            try:
                result.saved.append(self._save_one(record, owner_id))
            except CipherConfigurationError:
                raise
            except Exception as exc:
                message = f'Failed to save credential "{record.name}": {exc}'
                Log.error(message)
                result.errors.append(message)

            if on_progress is not None:
                on_progress(
                    ProgressEvent(
                        SAVING_PROGRESS,
                        {
                            "current": index,
                            "total": total,
                            "message": f"Saving credential {index}/{total}",
                        },
                    )
                )

        Log.info(
            f"Saved {len(result.saved)}/{total} credentials for owner {owner_id} "
            f"({len(result.errors)} failed)"
        )
        return result

    def _check_store(self) -> None:
        try:
            self._repo.ping()
        except Exception as exc:
            raise StoreUnavailableError(f"Record store unavailable: {exc}") from exc

    def _save_one(self, record: CredentialRecord, owner_id: str) -> StoredCredential:
        row = self._repo.create(
            owner_id,
            {
                "name": record.name,
                "username": record.username,
                "email": record.email,
                "password": self._cipher.encrypt(record.secret),
                "website": record.website,
                "description": record.description,
            },
        )
        return StoredCredential(
            id=row.id,
            name=row.name,
            username=row.username,
            email=row.email,
            website=row.website,
            description=row.description,
            created_at=row.created_at,
        )
