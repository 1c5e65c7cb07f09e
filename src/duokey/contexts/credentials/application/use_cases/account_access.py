from __future__ import annotations

import logging
from dataclasses import dataclass

from duokey.contexts.credentials.application.ports import (
    AccountStore,
    AccountStoreError,
    EncryptedBlobFormatError,
    SecretCryptoError,
    SecretEncryptor,
)
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialInternalError,
    CredentialNotFoundError,
    CredentialUnauthorizedError,
)
from duokey.contexts.credentials.domain.entities import (
    AccountRecord,
    TotpCredential,
    U2fCredential,
)
from duokey.shared_kernel.primitives import ApiKey

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthorizedAccount:
    """
    AuthorizedAccount — account snapshot that passed API-key, secret, and activation checks.

    `api_secret` is the per-request encryption key; it lives only for the request.

    Related:
      - src/duokey/contexts/credentials/domain/entities/account_record.py
    """

    record: AccountRecord
    api_secret: str

    @property
    def api_key(self) -> ApiKey:
        return self.record.api_key

    def __repr__(self) -> str:
        return f"AuthorizedAccount(api_key={self.record.api_key!s})"


class AccountAccess:
    """
    AccountAccess — shared precondition chain, persistence, and encryption for use-cases.

    Every credential operation goes through the same ordered checks:
    API key present → API secret present → account exists → account activated.
    Credential uuid lookups follow with `require_totp_credential` or
    `require_u2f_credential`. Infrastructure failures are logged here and surface
    as `CredentialInternalError`.

    Related:
      - src/duokey/contexts/credentials/application/ports/account_store.py
      - src/duokey/contexts/credentials/application/ports/secret_encryptor.py
      - src/duokey/contexts/credentials/application/use_cases/credential_errors.py
    """

    def __init__(self, *, store: AccountStore, encryptor: SecretEncryptor) -> None:
        """
        Initialize shared access helper.

        Args:
            store: Account record store port.
            encryptor: Per-request secret encryptor port.
        Returns:
            None.
        Assumptions:
            Both collaborators are stateless or safe for concurrent requests.
        Raises:
            ValueError: If one of dependencies is missing.
        Side Effects:
            None.
        """
        if store is None:  # type: ignore[truthy-bool]
            raise ValueError("AccountAccess requires store")
        if encryptor is None:  # type: ignore[truthy-bool]
            raise ValueError("AccountAccess requires encryptor")
        self._store = store
        self._encryptor = encryptor

    def authorize(self, *, api_key: str | None, api_secret: str | None) -> AuthorizedAccount:
        """
        Run the account part of the precondition chain.

        Args:
            api_key: Raw API key from the caller.
            api_secret: Raw API secret (base64 AES-256 key) from the caller.
        Returns:
            AuthorizedAccount: Activated account snapshot with the request secret.
        Assumptions:
            The secret itself is not compared with stored data; a wrong secret only
            yields undecryptable blobs.
        Raises:
            CredentialUnauthorizedError: If a credential is blank, account is missing,
                or account is not activated.
            CredentialInternalError: If the store read fails.
        Side Effects:
            Reads one account record.
        """
        if api_key is None or not api_key.strip():
            raise CredentialUnauthorizedError()
        if api_secret is None or not api_secret.strip():
            raise CredentialUnauthorizedError()

        key = ApiKey(api_key)
        try:
            record = self._store.get(api_key=key)
        except AccountStoreError:
            log.exception("account read failed api_key=%s", key)
            raise CredentialInternalError() from None
        if record is None:
            log.info("unknown api key api_key=%s", key)
            raise CredentialUnauthorizedError()
        if not self._store.is_activated(record=record):
            log.info("account not activated api_key=%s", key)
            raise CredentialUnauthorizedError()
        return AuthorizedAccount(record=record, api_secret=api_secret.strip())

    def save(self, *, record: AccountRecord) -> None:
        """
        Persist the whole account snapshot.

        Args:
            record: Updated account snapshot.
        Returns:
            None.
        Assumptions:
            Last writer wins.
        Raises:
            CredentialInternalError: If the store write fails.
        Side Effects:
            Writes one account record.
        """
        try:
            self._store.put(record=record)
        except AccountStoreError:
            log.exception("account write failed api_key=%s", record.api_key)
            raise CredentialInternalError() from None

    def encrypt(self, *, account: AuthorizedAccount, plaintext: str) -> str:
        try:
            return self._encryptor.encrypt(plaintext=plaintext, key_b64=account.api_secret)
        except SecretCryptoError:
            log.exception("credential encryption failed api_key=%s", account.api_key)
            raise CredentialInternalError() from None

    def decrypt(self, *, account: AuthorizedAccount, blob: str) -> str:
        """
        Decrypt one stored blob with the request secret.

        Args:
            account: Authorized account providing the secret.
            blob: Stored `nonce:ciphertext` blob.
        Returns:
            str: Plaintext value.
        Assumptions:
            A mismatching secret is indistinguishable from corrupted storage.
        Raises:
            CredentialInternalError: If blob format or decryption fails.
        Side Effects:
            None.
        """
        try:
            return self._encryptor.decrypt(blob=blob, key_b64=account.api_secret)
        except (EncryptedBlobFormatError, SecretCryptoError):
            log.exception("credential decryption failed api_key=%s", account.api_key)
            raise CredentialInternalError() from None


def require_totp_credential(
    *,
    account: AuthorizedAccount,
    credential_uuid: str | None,
) -> TotpCredential:
    """
    Resolve TOTP credential or fail with `Unauthorized`.

    Args:
        account: Authorized account snapshot.
        credential_uuid: Caller-supplied credential uuid.
    Returns:
        TotpCredential: Stored encrypted credential.
    Assumptions:
        Missing TOTP entries are reported like bad credentials.
    Raises:
        CredentialUnauthorizedError: If uuid is blank or unknown.
    Side Effects:
        None.
    """
    if credential_uuid is None or not credential_uuid.strip():
        raise CredentialUnauthorizedError()
    credential = account.record.find_totp_credential(credential_uuid=credential_uuid.strip())
    if credential is None:
        log.info("totp credential not found api_key=%s uuid=%s", account.api_key, credential_uuid)
        raise CredentialUnauthorizedError()
    return credential


def require_u2f_credential(
    *,
    account: AuthorizedAccount,
    credential_uuid: str | None,
) -> U2fCredential:
    """
    Resolve U2F credential or fail with `NotFound`.

    Args:
        account: Authorized account snapshot.
        credential_uuid: Caller-supplied credential uuid.
    Returns:
        U2fCredential: Pending or registered credential.
    Assumptions:
        None.
    Raises:
        CredentialNotFoundError: If uuid is blank or unknown.
    Side Effects:
        None.
    """
    if credential_uuid is None or not credential_uuid.strip():
        raise CredentialNotFoundError()
    credential = account.record.find_u2f_credential(credential_uuid=credential_uuid.strip())
    if credential is None:
        log.info("u2f credential not found api_key=%s uuid=%s", account.api_key, credential_uuid)
        raise CredentialNotFoundError()
    return credential
