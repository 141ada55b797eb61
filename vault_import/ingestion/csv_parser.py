"""Direct CSV-to-record parser, used when the model is bypassed or unavailable."""

from vault_import.ingestion.exceptions import EmptyInputError
from vault_import.ingestion.models import CredentialRecord
from vault_import.ingestion.validator import build_record
from vault_import.logging.logger import Log

DEFAULT_NAME = "Unknown Service"

HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "name": ("name", "service", "title"),
    "username": ("username", "login", "user"),
    "email": ("email",),
    "password": ("password", "pass"),
    "website": ("website", "url", "site"),
    "description": ("description", "note", "notes"),
}


def parse_csv(text: str) -> list[CredentialRecord]:
    """Parse a header + rows CSV export into CredentialRecords.

    Headers are matched case-insensitively against HEADER_SYNONYMS. Rows
    without a password, or with a blank value in a name column, are dropped.

    Raises:
        EmptyInputError: if there is no header row plus at least one data row.
    """
    lines = [line.rstrip("\r") for line in text.strip().split("\n")]
    if len(lines) < 2 or not lines[0].strip():
        raise EmptyInputError("CSV must have at least a header row and one data row")

    headers = [h.lower() for h in split_csv_line(lines[0])]
    has_name_column = any(h in HEADER_SYNONYMS["name"] for h in headers)

    records: list[CredentialRecord] = []
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        row = _map_row(headers, split_csv_line(line))
        candidate = {
            field: _first_present(row, synonyms)
            for field, synonyms in HEADER_SYNONYMS.items()
        }
        if not has_name_column and candidate["name"] is None:
            candidate["name"] = DEFAULT_NAME

        record = build_record(candidate)
        if record is None:
            Log.debug(f"Skipping CSV line {line_number}: missing name or password")
            continue
        records.append(record)

    Log.info(f"CSV parsing complete: {len(records)} records from {len(lines) - 1} rows")
    return records


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas outside double quotes; quotes are dropped."""
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    values.append("".join(current).strip())
    return values


def _map_row(headers: list[str], values: list[str]) -> dict[str, str]:
    return {
        header: values[index]
        for index, header in enumerate(headers)
        if index < len(values) and values[index]
    }


def _first_present(row: dict[str, str], synonyms: tuple[str, ...]) -> str | None:
    for key in synonyms:
        if key in row:
            return row[key]
    return None
