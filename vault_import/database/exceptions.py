class DatabaseError(Exception):
    """Base exception for record store errors."""


class CredentialNotFoundError(DatabaseError):
    """Raised when a credential does not exist for the requesting owner."""
