"""Envelope encryption for credential secrets.

Every ``encrypt`` call derives a fresh AES-256 key from the master secret and a
new random salt (PBKDF2-HMAC-SHA512), then seals the plaintext with AES-GCM
under a fresh IV. The stored token carries everything except the master secret:

    hex(salt):hex(iv):hex(ciphertext):hex(tag)
"""

import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from vault_import.crypto.exceptions import CipherConfigurationError
from vault_import.logging.logger import Log

PBKDF2_ITERATIONS = 310_000
KEY_LENGTH = 32
SALT_LENGTH = 16
IV_LENGTH = 16
TAG_LENGTH = 16
TOKEN_SEPARATOR = ":"


class EnvelopeCipher:
    """Encrypts and decrypts single secret values under a master secret."""

    def __init__(self, master_password: str) -> None:
        self._master_password = master_password

    @property
    def is_configured(self) -> bool:
        return bool(self._master_password)

    def ensure_configured(self) -> None:
        """Raise CipherConfigurationError when no master secret is available."""
        if not self._master_password:
            raise CipherConfigurationError(
                "Master password not set in environment (MASTER_PASSWORD)"
            )

    def encrypt(self, plaintext: str) -> str:
        """Encrypt *plaintext* and return a ``salt:iv:ciphertext:tag`` token.

        Raises:
            CipherConfigurationError: if the master secret is not configured.
        """
        self.ensure_configured()
        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        key = self._derive_key(salt)
        sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return TOKEN_SEPARATOR.join(
            part.hex() for part in (salt, iv, ciphertext, tag)
        )

    def decrypt(self, token: str) -> str | None:
        """Decrypt a token produced by :meth:`encrypt`.

        Returns None when the token is malformed, has been tampered with, or was
        sealed under a different master secret.

        Raises:
            CipherConfigurationError: if the master secret is not configured.
        """
        self.ensure_configured()
        parts = token.split(TOKEN_SEPARATOR)
        if len(parts) != 4:
            Log.warning("Invalid encrypted secret format")
            return None

        try:
            salt, iv, ciphertext, tag = (binascii.unhexlify(part) for part in parts)
        except (binascii.Error, ValueError):
            Log.warning("Encrypted secret is not valid hex")
            return None

        if len(tag) != TAG_LENGTH or not iv:
            Log.warning("Encrypted secret has an invalid IV or tag length")
            return None

        try:
            key = self._derive_key(salt)
            plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
        except InvalidTag:
            Log.warning("Encrypted secret failed authentication")
            return None
        except (ValueError, TypeError, OverflowError) as exc:
            Log.warning(f"Secret decryption failed: {exc}")
            return None

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=PBKDF2_ITERATIONS,
        )
        return kdf.derive(self._master_password.encode("utf-8"))
