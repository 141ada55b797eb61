from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

SOURCE_KINDS = frozenset({"csv", "text", "image", "pdf"})

PROGRESS = "progress"
PROCESSING_COMPLETE = "processing_complete"
SAVING_PROGRESS = "saving_progress"
SUCCESS = "success"
ERROR = "error"

TERMINAL_EVENT_KINDS = frozenset({SUCCESS, ERROR})


@dataclass(frozen=True)
class RawContent:
    """An uploaded document reduced to text, ready for the pipeline."""

    text: str
    source_kind: str
    file_name: str = ""


@dataclass(frozen=True)
class Chunk:
    """A bounded slice of input text submitted to extraction as one unit."""

    sequence_index: int
    text: str
    size_chars: int


@dataclass(frozen=True)
class CredentialRecord:
    """A validated credential. ``secret`` is plaintext and never persisted as-is."""

    name: str
    secret: str
    username: str | None = None
    email: str | None = None
    website: str | None = None
    description: str | None = None

    def to_public_dict(self) -> dict[str, str | None]:
        """Serializable view without the secret."""
        return {
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "website": self.website,
            "description": self.description,
        }


@dataclass(frozen=True)
class StoredCredential:
    """Summary of a persisted credential returned to callers (no secret)."""

    id: str
    name: str
    username: str | None = None
    email: str | None = None
    website: str | None = None
    description: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        del data["created_at"]
        return data


@dataclass
class SaveResult:
    """Outcome of persisting a batch of records."""

    saved: list[StoredCredential] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Accumulates counts as a run moves from extraction to saving."""

    records: list[CredentialRecord] = field(default_factory=list)
    total_processed: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "credentials": [r.to_public_dict() for r in self.records],
            "totalProcessed": self.total_processed,
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class ProgressEvent:
    """One frame on the progress channel."""

    kind: str
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_EVENT_KINDS

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "data": self.payload}
