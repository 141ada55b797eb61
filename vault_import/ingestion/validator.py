"""Filters untrusted candidate records down to canonical CredentialRecords."""

from typing import Any

from vault_import.ingestion.models import CredentialRecord

MAX_NAME_LENGTH = 255
_OPTIONAL_FIELDS = ("username", "email", "website", "description")


def normalize_candidates(candidates: Any) -> list[CredentialRecord]:
    """Validate raw candidates and build CredentialRecords.

    Never raises: anything that is not an object, or lacks a name or a
    password, is dropped.
    """
    if not isinstance(candidates, list):
        return []
    records: list[CredentialRecord] = []
    for candidate in candidates:
        record = build_record(candidate)
        if record is not None:
            records.append(record)
    return records


def build_record(candidate: Any) -> CredentialRecord | None:
    """Build a single CredentialRecord, or None if *candidate* is unusable."""
    if not isinstance(candidate, dict):
        return None

    name = _coerce_text(candidate.get("name"))
    secret = _coerce_text(candidate.get("password")) or _coerce_text(candidate.get("secret"))
    if not name or not secret:
        return None

    optional = {field: _coerce_text(candidate.get(field)) or None for field in _OPTIONAL_FIELDS}
    return CredentialRecord(name=name[:MAX_NAME_LENGTH], secret=secret, **optional)


def _coerce_text(raw: Any) -> str:
    if raw is None or isinstance(raw, (dict, list)):
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (int, float)):
        return str(raw)
    if isinstance(raw, str):
        return raw
    return ""
