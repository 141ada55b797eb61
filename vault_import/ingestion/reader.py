import math
from dataclasses import dataclass, field
from typing import Any

from vault_import.crypto.cache import DecryptionCache
from vault_import.crypto.cipher import EnvelopeCipher
from vault_import.database.models import CredentialRow
from vault_import.database.repositories.credentials_repository import CredentialsRepository
from vault_import.logging.logger import Log


@dataclass
class CredentialPage:
    """One page of an owner's credentials with secrets decrypted."""

    credentials: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        total_pages = math.ceil(self.total / self.limit) if self.limit else 0
        return {
            "credentials": self.credentials,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": total_pages,
                "hasNext": self.page * self.limit < self.total,
                "hasPrev": self.page > 1,
            },
        }


class CredentialReader:
    """Read path for stored credentials; decrypts through a bounded cache."""

    def __init__(
        self,
        repo: CredentialsRepository,
        cipher: EnvelopeCipher,
        cache: DecryptionCache,
    ) -> None:
        self._repo = repo
        self._cipher = cipher
        self._cache = cache

    def list_page(
        self,
        owner_id: str,
        page: int = 1,
        limit: int = 20,
        search: str = "",
    ) -> CredentialPage:
        page = max(1, page)
        limit = max(1, min(100, limit))
        rows = self._repo.find_many(owner_id, search=search, limit=limit, offset=(page - 1) * limit)
        total = self._repo.count(owner_id, search=search)
        return CredentialPage(
            credentials=[self._to_dict(row) for row in rows],
            page=page,
            limit=limit,
            total=total,
        )

    def reveal(self, row: CredentialRow) -> str | None:
        """Decrypt the secret of *row*, or None when it cannot be decrypted."""
        version = row.updated_at.isoformat() if row.updated_at else ""
        cached = self._cache.get(row.id, version)
        if cached is not None:
            return cached
        plaintext = self._cipher.decrypt(row.password)
        if plaintext is None:
            Log.warning(f"Could not decrypt secret for credential {row.id}")
            return None
        self._cache.put(row.id, version, plaintext)
        return plaintext

    def _to_dict(self, row: CredentialRow) -> dict[str, Any]:
        return {
            "id": row.id,
            "name": row.name,
            "username": row.username,
            "email": row.email,
            "password": self.reveal(row) or "",
            "website": row.website,
            "description": row.description,
            "createdAt": row.created_at.isoformat() if row.created_at else None,
            "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
        }
