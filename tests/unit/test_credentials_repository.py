from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from vault_import.database.exceptions import CredentialNotFoundError
from vault_import.database.models import CredentialRow
from vault_import.database.repositories.credentials_repository import CredentialsRepository

_REPO = "vault_import.database.repositories.credentials_repository.get_connection"
_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"
_MISSING_ID = "00000000-0000-4000-8000-000000000000"


def _make_row(**overrides: object) -> dict:
    row = {
        "id": _ID,
        "owner_id": "owner-1",
        "name": "Gmail",
        "username": "alice",
        "email": None,
        "password": "aa:bb:cc:dd",
        "website": None,
        "description": None,
        "created_at": _NOW,
        "updated_at": _NOW,
    }
    row.update(overrides)
    return row


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestPing:
    @patch(_REPO)
    def test_runs_trivial_query(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)
        CredentialsRepository().ping()
        mock_conn.execute.assert_called_once_with("SELECT 1")


class TestCreate:
    @patch(_REPO)
    def test_inserts_and_returns_row(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        result = CredentialsRepository().create(
            "owner-1", {"name": "Gmail", "username": "alice", "password": "aa:bb:cc:dd"}
        )

        assert isinstance(result, CredentialRow)
        assert result.id == _ID
        assert result.password == "aa:bb:cc:dd"
        _query, params = mock_cursor.execute.call_args.args
        assert params == ("owner-1", "Gmail", "alice", "aa:bb:cc:dd")
        mock_conn.commit.assert_called_once()

    @patch(_REPO)
    def test_rejects_unknown_fields(self, mock_get_conn: MagicMock) -> None:
        _mock_connection(mock_get_conn)
        with pytest.raises(ValueError, match="Unknown credential fields"):
            CredentialsRepository().create("owner-1", {"name": "x", "secret": "y"})


class TestFindById:
    @patch(_REPO)
    def test_returns_row_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        result = CredentialsRepository().find_by_id("owner-1", _ID)

        assert result.name == "Gmail"
        assert mock_cursor.execute.call_args.args[1] == (_ID, "owner-1")

    @patch(_REPO)
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(CredentialNotFoundError, match=f"Credential {_MISSING_ID} not found"):
            CredentialsRepository().find_by_id("owner-1", _MISSING_ID)


class TestFindMany:
    @patch(_REPO)
    def test_scopes_by_owner_and_search(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_make_row(), _make_row(name="Yahoo")]

        result = CredentialsRepository().find_many("owner-1", search=" git ", limit=5, offset=10)

        assert [r.name for r in result] == ["Gmail", "Yahoo"]
        query, params = mock_cursor.execute.call_args.args
        assert "ORDER BY name ASC" in query
        assert params == {
            "owner_id": "owner-1",
            "search": "git",
            "pattern": "%git%",
            "limit": 5,
            "offset": 10,
        }


class TestCount:
    @patch(_REPO)
    def test_returns_count(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (12,)
        assert CredentialsRepository().count("owner-1") == 12


class TestUpdate:
    @patch(_REPO)
    def test_updates_and_returns_row(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row(name="Renamed")

        result = CredentialsRepository().update("owner-1", _ID, {"name": "Renamed"})

        assert result.name == "Renamed"
        assert mock_cursor.execute.call_args.args[1] == ("Renamed", _ID, "owner-1")
        mock_conn.commit.assert_called_once()

    @patch(_REPO)
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(CredentialNotFoundError):
            CredentialsRepository().update("owner-1", _ID, {"name": "Renamed"})


class TestDelete:
    @patch(_REPO)
    def test_deletes_row(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        CredentialsRepository().delete("owner-1", _ID)

        assert mock_cursor.execute.call_args.args[1] == (_ID, "owner-1")
        mock_conn.commit.assert_called_once()

    @patch(_REPO)
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(CredentialNotFoundError):
            CredentialsRepository().delete("owner-1", _ID)
        mock_conn.commit.assert_not_called()


class TestMalformedId:
    @pytest.mark.parametrize("method", ["find_by_id", "delete"])
    @patch(_REPO)
    def test_non_uuid_is_not_found(self, mock_get_conn: MagicMock, method: str) -> None:
        with pytest.raises(CredentialNotFoundError, match="Credential abc not found"):
            getattr(CredentialsRepository(), method)("owner-1", "abc")
        mock_get_conn.assert_not_called()

    @patch(_REPO)
    def test_update_with_non_uuid_is_not_found(self, mock_get_conn: MagicMock) -> None:
        with pytest.raises(CredentialNotFoundError):
            CredentialsRepository().update("owner-1", "abc", {"name": "x"})
        mock_get_conn.assert_not_called()
