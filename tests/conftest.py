import pytest

from vault_import.ingestion.models import CredentialRecord


@pytest.fixture()
def sample_csv_text() -> str:
    """A small password-manager export with one unusable row."""
    return "name,password\nGmail,abc123\n,missing\nYahoo,xyz789"


@pytest.fixture()
def sample_records() -> list[CredentialRecord]:
    """Five validated records, named service-1 .. service-5."""
    return [
        CredentialRecord(name=f"service-{i}", secret=f"secret-{i}", username=f"user{i}")
        for i in range(1, 6)
    ]
