from __future__ import annotations

from typing import Protocol


class EncryptedBlobFormatError(ValueError):
    """Encrypted blob is not `base64(nonce):base64(ciphertext)`."""


class SecretCryptoError(ValueError):
    """API secret cannot be used as a key or the cipher operation failed."""


class SecretEncryptor(Protocol):
    """
    SecretEncryptor — per-request symmetric encryption keyed by the caller's API secret.

    The service never stores the key; every call receives it explicitly.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/security/encryption/
        aes_ctr_secret_encryptor.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
    """

    def encrypt(self, *, plaintext: str, key_b64: str) -> str:
        """
        Encrypt text under a base64-encoded 256-bit key with a fresh nonce.

        Args:
            plaintext: UTF-8 text to protect.
            key_b64: Base64 API secret.
        Returns:
            str: `base64(nonce):base64(ciphertext)` blob.
        Assumptions:
            Nonce is never reused under the same key.
        Raises:
            SecretCryptoError: If key cannot be decoded or has wrong length.
        Side Effects:
            Reads the OS random source.
        """
        ...

    def decrypt(self, *, blob: str, key_b64: str) -> str:
        """
        Decrypt blob produced by `encrypt`.

        Args:
            blob: `base64(nonce):base64(ciphertext)` blob.
            key_b64: Base64 API secret.
        Returns:
            str: Recovered plaintext.
        Assumptions:
            No integrity check is performed; a wrong key usually surfaces as invalid UTF-8.
        Raises:
            EncryptedBlobFormatError: If blob does not split into exactly two base64 parts.
            SecretCryptoError: If key or cipher operation fails.
        Side Effects:
            None.
        """
        ...
