from __future__ import annotations

import base64
import binascii
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from duokey.contexts.credentials.application.ports.secret_encryptor import (
    EncryptedBlobFormatError,
    SecretCryptoError,
    SecretEncryptor,
)

_KEY_LENGTH = 32
_NONCE_LENGTH = 16
_BLOB_SEPARATOR = ":"


class AesCtrSecretEncryptor(SecretEncryptor):
    """
    AesCtrSecretEncryptor — AES-256-CTR encryption keyed by the caller's API secret.

    Blob format is `base64(nonce):base64(ciphertext)` with a fresh 16-byte nonce per call.
    CTR mode carries no authentication tag: tampering is not detected, and a wrong key
    yields garbage that is rejected only when it is not valid UTF-8.

    Related:
      - src/duokey/contexts/credentials/application/ports/secret_encryptor.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
      - apps/api/wiring/modules/credentials.py
    """

    def encrypt(self, *, plaintext: str, key_b64: str) -> str:
        """
        Encrypt UTF-8 text with AES-256-CTR under a random nonce.

        Args:
            plaintext: Text to encrypt.
            key_b64: Base64-encoded 32-byte key.
        Returns:
            str: `base64(nonce):base64(ciphertext)` blob.
        Assumptions:
            Ciphertext length equals encoded plaintext length.
        Raises:
            SecretCryptoError: If key is malformed or has wrong length.
        Side Effects:
            Reads 16 bytes from the OS random source.
        """
        key = _decode_key(key_b64=key_b64)
        nonce = os.urandom(_NONCE_LENGTH)
        encryptor = Cipher(algorithms.AES(key), modes.CTR(nonce)).encryptor()
        ciphertext = encryptor.update(plaintext.encode("utf-8")) + encryptor.finalize()
        return _BLOB_SEPARATOR.join(
            (
                base64.b64encode(nonce).decode("ascii"),
                base64.b64encode(ciphertext).decode("ascii"),
            )
        )

    def decrypt(self, *, blob: str, key_b64: str) -> str:
        """
        Decrypt `base64(nonce):base64(ciphertext)` blob.

        Args:
            blob: Encrypted blob produced by `encrypt`.
            key_b64: Base64-encoded 32-byte key.
        Returns:
            str: Decrypted UTF-8 text.
        Assumptions:
            Blob contains exactly one separator.
        Raises:
            EncryptedBlobFormatError: If blob shape or base64 parts are invalid.
            SecretCryptoError: If key is invalid, nonce length is wrong, or plaintext
                is not UTF-8.
        Side Effects:
            None.
        """
        parts = blob.split(_BLOB_SEPARATOR)
        if len(parts) != 2:
            raise EncryptedBlobFormatError("encrypted blob must be 'nonce:ciphertext'")
        try:
            nonce = base64.b64decode(parts[0], validate=True)
            ciphertext = base64.b64decode(parts[1], validate=True)
        except binascii.Error as error:
            raise EncryptedBlobFormatError("encrypted blob parts must be base64") from error

        key = _decode_key(key_b64=key_b64)
        if len(nonce) != _NONCE_LENGTH:
            raise SecretCryptoError(f"nonce must be {_NONCE_LENGTH} bytes")
        decryptor = Cipher(algorithms.AES(key), modes.CTR(nonce)).decryptor()
        plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as error:
            raise SecretCryptoError("decrypted value is not valid UTF-8") from error


def _decode_key(*, key_b64: str) -> bytes:
    """
    Decode base64 API secret into a 256-bit AES key.

    Args:
        key_b64: Base64 API secret.
    Returns:
        bytes: 32-byte key.
    Assumptions:
        Surrounding whitespace is not part of the key.
    Raises:
        SecretCryptoError: If value is not base64 or does not decode to 32 bytes.
    Side Effects:
        None.
    """
    try:
        key = base64.b64decode(key_b64.strip(), validate=True)
    except binascii.Error as error:
        raise SecretCryptoError("API secret must be valid base64") from error
    if len(key) != _KEY_LENGTH:
        raise SecretCryptoError(f"API secret must decode to {_KEY_LENGTH} bytes")
    return key
