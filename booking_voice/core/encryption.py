"""
Credential Vault
AES-256-GCM encryption for provider API keys stored per organization
"""

import hashlib
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import Settings
from .exceptions import EncryptionError
from .logging import get_logger

logger = get_logger(__name__)

IV_LENGTH = 16
TAG_LENGTH = 16

# Development-only fallback; deployments must set BOLNA_ENCRYPTION_KEY
DEFAULT_DEV_SECRET = "default-bolna-encryption-key-32!"


class CredentialVault:
    """
    Encrypts and decrypts provider credentials

    Records are stored as ``<ivHex>:<authTagHex>:<ciphertextHex>`` so they
    fit in a single text column.
    """

    def __init__(self, secret: Optional[str] = None):
        if not secret:
            logger.warning("BOLNA_ENCRYPTION_KEY not set. Using default development key.")
            secret = DEFAULT_DEV_SECRET
            self.uses_fallback_key = True
        else:
            self.uses_fallback_key = False

        # Hash the secret so any length maps to a 32-byte AES-256 key
        self._aesgcm = AESGCM(hashlib.sha256(secret.encode("utf-8")).digest())

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialVault":
        """Build a vault from application settings"""
        return cls(settings.bolna_encryption_key)

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """
        Encrypt a credential

        Args:
            plaintext: Value to encrypt

        Returns:
            Encoded record, or None for empty input
        """
        if not plaintext:
            return None

        try:
            iv = os.urandom(IV_LENGTH)
            sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        except Exception as e:
            logger.error(f"Encryption error: {type(e).__name__}")
            raise EncryptionError() from e

        ciphertext, auth_tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{auth_tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, record: Optional[str]) -> Optional[str]:
        """
        Decrypt a stored credential

        Any malformed record, wrong key or tampered tag yields None.
        """
        if not record:
            return None

        try:
            parts = record.split(":")
            if len(parts) != 3 or not all(parts):
                raise ValueError("Invalid encrypted data format")

            iv_hex, tag_hex, ciphertext_hex = parts
            iv = bytes.fromhex(iv_hex)
            auth_tag = bytes.fromhex(tag_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)

            if len(iv) != IV_LENGTH or len(auth_tag) != TAG_LENGTH:
                raise ValueError("Invalid encrypted data format")

            plaintext = self._aesgcm.decrypt(iv, ciphertext + auth_tag, None)
            return plaintext.decode("utf-8")
        except InvalidTag:
            logger.error("Decryption error: authentication tag mismatch")
            return None
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Decryption error: {e}")
            return None
