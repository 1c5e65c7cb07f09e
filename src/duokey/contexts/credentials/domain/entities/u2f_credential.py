from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union


@dataclass(frozen=True, slots=True)
class PendingU2fRegistration:
    """
    PendingU2fRegistration — U2F credential waiting for the device registration proof.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_registration.py
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_registration.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/account_document.py
    """

    encrypted_app_id: str
    encrypted_registration_request: str

    def __post_init__(self) -> None:
        """
        Validate that app id and registration challenge blobs are present.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Both blobs were produced by the secret encryptor with the caller's API secret.
        Raises:
            ValueError: If one of the blobs is blank.
        Side Effects:
            None.
        """
        _require_blob(name="encrypted_app_id", value=self.encrypted_app_id)
        _require_blob(
            name="encrypted_registration_request",
            value=self.encrypted_registration_request,
        )

    def register(
        self,
        *,
        encrypted_public_key: str,
        encrypted_key_handle: str,
    ) -> RegisteredU2fCredential:
        """
        Transition to registered state, dropping the consumed registration challenge.

        Args:
            encrypted_public_key: Encrypted websafe-base64 device public key.
            encrypted_key_handle: Encrypted websafe-base64 device key handle.
        Returns:
            RegisteredU2fCredential: Registered credential without pending authentication.
        Assumptions:
            Caller already verified the registration proof.
        Raises:
            ValueError: If one of the encrypted values is blank.
        Side Effects:
            None.
        """
        return RegisteredU2fCredential(
            encrypted_app_id=self.encrypted_app_id,
            encrypted_public_key=encrypted_public_key,
            encrypted_key_handle=encrypted_key_handle,
        )


@dataclass(frozen=True, slots=True)
class RegisteredU2fCredential:
    """
    RegisteredU2fCredential — U2F credential bound to one device key pair.

    `encrypted_authentication_request` is set while one authentication challenge
    is outstanding and is cleared after a single verification attempt.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_authentication.py
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_authentication.py
    """

    encrypted_app_id: str
    encrypted_public_key: str
    encrypted_key_handle: str
    encrypted_authentication_request: str | None = None

    def __post_init__(self) -> None:
        """
        Validate registered credential blobs.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Authentication request is either absent or a non-blank blob.
        Raises:
            ValueError: If a required blob is blank or the pending request is blank.
        Side Effects:
            None.
        """
        _require_blob(name="encrypted_app_id", value=self.encrypted_app_id)
        _require_blob(name="encrypted_public_key", value=self.encrypted_public_key)
        _require_blob(name="encrypted_key_handle", value=self.encrypted_key_handle)
        if self.encrypted_authentication_request is not None:
            _require_blob(
                name="encrypted_authentication_request",
                value=self.encrypted_authentication_request,
            )

    def with_authentication_request(self, *, encrypted_request: str) -> RegisteredU2fCredential:
        """
        Attach a new authentication challenge, replacing any outstanding one.

        Args:
            encrypted_request: Encrypted serialized authentication challenge.
        Returns:
            RegisteredU2fCredential: Credential awaiting proof.
        Assumptions:
            Only the latest issued challenge can be answered.
        Raises:
            ValueError: If encrypted request is blank.
        Side Effects:
            None.
        """
        return replace(self, encrypted_authentication_request=encrypted_request)

    def without_authentication_request(self) -> RegisteredU2fCredential:
        """Return the credential with its outstanding challenge consumed."""
        return replace(self, encrypted_authentication_request=None)


U2fCredential = Union[PendingU2fRegistration, RegisteredU2fCredential]


def _require_blob(*, name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"U2F credential field {name} must be non-empty")
