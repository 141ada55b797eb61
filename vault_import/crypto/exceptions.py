class CipherError(Exception):
    """Base exception for all secret-encryption errors."""


class CipherConfigurationError(CipherError):
    """Raised when the master secret is missing from configuration."""
