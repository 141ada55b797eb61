from vault_import.ingestion.models import CredentialRecord
from vault_import.ingestion.validator import MAX_NAME_LENGTH, build_record, normalize_candidates


class TestBuildRecord:
    def test_builds_full_record(self) -> None:
        record = build_record(
            {
                "name": "Gmail",
                "password": "abc123",
                "username": "alice",
                "email": "alice@example.com",
                "website": "https://mail.google.com",
                "description": "personal",
            }
        )
        assert record == CredentialRecord(
            name="Gmail",
            secret="abc123",
            username="alice",
            email="alice@example.com",
            website="https://mail.google.com",
            description="personal",
        )

    def test_accepts_secret_key_as_password(self) -> None:
        record = build_record({"name": "Vpn", "secret": "hunter2"})
        assert record is not None
        assert record.secret == "hunter2"

    def test_missing_password_is_dropped(self) -> None:
        assert build_record({"name": "NoPass"}) is None

    def test_missing_name_is_dropped(self) -> None:
        assert build_record({"password": "orphan"}) is None

    def test_empty_strings_are_dropped(self) -> None:
        assert build_record({"name": "", "password": "x"}) is None
        assert build_record({"name": "x", "password": ""}) is None

    def test_non_object_is_dropped(self) -> None:
        assert build_record("not an object") is None
        assert build_record(["name", "password"]) is None
        assert build_record(None) is None

    def test_long_name_is_truncated(self) -> None:
        record = build_record({"name": "n" * 400, "password": "p"})
        assert record is not None
        assert len(record.name) == MAX_NAME_LENGTH

    def test_scalar_values_are_coerced_to_text(self) -> None:
        record = build_record({"name": 42, "password": 1234, "description": True})
        assert record is not None
        assert record.name == "42"
        assert record.secret == "1234"
        assert record.description == "true"

    def test_blank_optional_fields_become_none(self) -> None:
        record = build_record({"name": "a", "password": "b", "username": "", "email": None})
        assert record is not None
        assert record.username is None
        assert record.email is None

    def test_nested_values_are_ignored(self) -> None:
        record = build_record({"name": "a", "password": "b", "website": {"url": "x"}})
        assert record is not None
        assert record.website is None


class TestNormalizeCandidates:
    def test_keeps_only_valid_candidates(self) -> None:
        records = normalize_candidates(
            [
                {"name": "A", "password": "1"},
                {"name": "B"},
                "junk",
                {"name": "C", "password": "3"},
            ]
        )
        assert [r.name for r in records] == ["A", "C"]

    def test_non_list_yields_empty(self) -> None:
        assert normalize_candidates({"name": "A", "password": "1"}) == []
        assert normalize_candidates(None) == []
