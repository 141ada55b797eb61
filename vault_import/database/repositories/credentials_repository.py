import uuid
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row

from vault_import.database.connection import get_connection
from vault_import.database.exceptions import CredentialNotFoundError
from vault_import.database.models import CredentialRow

WRITABLE_COLUMNS = ("name", "username", "email", "password", "website", "description")

_SELECT_COLUMNS = """
    id, owner_id, name, username, email, password, website, description,
    created_at, updated_at
"""

_SEARCH_CLAUSE = """
    AND (
        %(search)s::text = ''
        OR name ILIKE %(pattern)s
        OR username ILIKE %(pattern)s
        OR email ILIKE %(pattern)s
        OR website ILIKE %(pattern)s
    )
"""


class CredentialsRepository:
    """Database operations for the credentials table, always scoped by owner."""

    def ping(self) -> None:
        """Run a trivial query. Raises if the store is unreachable."""
        with get_connection() as conn:
            conn.execute("SELECT 1")

    def create(self, owner_id: str, fields: dict[str, Any]) -> CredentialRow:
        """Insert one credential. ``fields['password']`` must already be encrypted."""
        values = self._writable(fields)
        columns = ["owner_id", *values]
        query = sql.SQL(
            "INSERT INTO credentials ({columns}) VALUES ({placeholders}) "
            "RETURNING " + _SELECT_COLUMNS
        ).format(
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            placeholders=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, (owner_id, *values.values()))
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT INTO credentials returned no row")
        return self._to_record(row)

    def find_by_id(self, owner_id: str, credential_id: str) -> CredentialRow:
        """Find a credential by ID for its owner.

        Raises:
            CredentialNotFoundError: if no such credential belongs to *owner_id*.
        """
        self._require_uuid(credential_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT " + _SELECT_COLUMNS + """
                    FROM credentials
                    WHERE id = %s AND owner_id = %s
                    """,
                    (credential_id, owner_id),
                )
                row = cur.fetchone()

        if row is None:
            raise CredentialNotFoundError(f"Credential {credential_id} not found")
        return self._to_record(row)

    def find_many(
        self,
        owner_id: str,
        search: str = "",
        limit: int = 20,
        offset: int = 0,
    ) -> list[CredentialRow]:
        """List an owner's credentials ordered by name, optionally filtered."""
        params = self._search_params(owner_id, search)
        params.update(limit=limit, offset=offset)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT " + _SELECT_COLUMNS + """
                    FROM credentials
                    WHERE owner_id = %(owner_id)s
                    """ + _SEARCH_CLAUSE + """
                    ORDER BY name ASC, created_at ASC
                    LIMIT %(limit)s OFFSET %(offset)s
                    """,
                    params,
                )
                rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def count(self, owner_id: str, search: str = "") -> int:
        """Count an owner's credentials matching *search*."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT COUNT(*)
                    FROM credentials
                    WHERE owner_id = %(owner_id)s
                    """ + _SEARCH_CLAUSE,
                    self._search_params(owner_id, search),
                )
                row = cur.fetchone()
        return int(row[0]) if row is not None else 0

    def update(
        self,
        owner_id: str,
        credential_id: str,
        fields: dict[str, Any],
    ) -> CredentialRow:
        """Update writable columns of a credential.

        Raises:
            CredentialNotFoundError: if no such credential belongs to *owner_id*.
        """
        self._require_uuid(credential_id)
        values = self._writable(fields)
        if not values:
            return self.find_by_id(owner_id, credential_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
            for column in values
        )
        query = sql.SQL(
            "UPDATE credentials SET {assignments}, updated_at = NOW() "
            "WHERE id = {id} AND owner_id = {owner} RETURNING " + _SELECT_COLUMNS
        ).format(
            assignments=assignments,
            id=sql.Placeholder(),
            owner=sql.Placeholder(),
        )
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, (*values.values(), credential_id, owner_id))
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise CredentialNotFoundError(f"Credential {credential_id} not found")
        return self._to_record(row)

    def delete(self, owner_id: str, credential_id: str) -> None:
        """Delete a credential.

        Raises:
            CredentialNotFoundError: if no such credential belongs to *owner_id*.
        """
        self._require_uuid(credential_id)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM credentials WHERE id = %s AND owner_id = %s",
                    (credential_id, owner_id),
                )
                if cur.rowcount == 0:
                    raise CredentialNotFoundError(f"Credential {credential_id} not found")
            conn.commit()

    @staticmethod
    def _require_uuid(credential_id: str) -> None:
        try:
            uuid.UUID(str(credential_id))
        except ValueError as exc:
            raise CredentialNotFoundError(f"Credential {credential_id} not found") from exc

    @staticmethod
    def _writable(fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - set(WRITABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown credential fields: {sorted(unknown)}")
        return {column: fields[column] for column in WRITABLE_COLUMNS if column in fields}

    @staticmethod
    def _search_params(owner_id: str, search: str) -> dict[str, Any]:
        search = search.strip()
        return {"owner_id": owner_id, "search": search, "pattern": f"%{search}%"}

    @staticmethod
    def _to_record(row: dict[str, Any]) -> CredentialRow:
        return CredentialRow(
            id=str(row["id"]),
            owner_id=row["owner_id"],
            name=row["name"],
            password=row["password"],
            username=row["username"],
            email=row["email"],
            website=row["website"],
            description=row["description"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
