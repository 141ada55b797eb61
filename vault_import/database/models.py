from dataclasses import dataclass
from datetime import datetime


@dataclass
class CredentialRow:
    """Represents a row from the credentials table. ``password`` holds the encrypted token."""

    id: str
    owner_id: str
    name: str
    password: str
    username: str | None = None
    email: str | None = None
    website: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
