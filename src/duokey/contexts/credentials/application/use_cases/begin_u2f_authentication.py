from __future__ import annotations

import logging
from dataclasses import dataclass

from duokey.contexts.credentials.application.ports import AccountStore, SecretEncryptor, U2fProtocol
from duokey.contexts.credentials.application.use_cases.account_access import (
    AccountAccess,
    require_u2f_credential,
)
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialStateConflictError,
)
from duokey.contexts.credentials.domain.entities import RegisteredU2fCredential
from duokey.contexts.credentials.domain.value_objects import U2fChallenge

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BeginU2fAuthenticationResult:
    """Authentication request addressed to the registered device of one credential."""

    uuid: str
    challenge: U2fChallenge


class BeginU2fAuthenticationUseCase:
    """
    BeginU2fAuthenticationUseCase — issue a single-use authentication challenge.

    Issuing a new challenge replaces any outstanding one; only the latest can be answered.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_authentication.py
      - src/duokey/contexts/credentials/domain/entities/u2f_credential.py
    """

    def __init__(
        self,
        *,
        store: AccountStore,
        encryptor: SecretEncryptor,
        protocol: U2fProtocol,
    ) -> None:
        if protocol is None:  # type: ignore[truthy-bool]
            raise ValueError("BeginU2fAuthenticationUseCase requires protocol")
        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._protocol = protocol

    def begin(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        credential_uuid: str | None,
    ) -> BeginU2fAuthenticationResult:
        """
        Build challenge bound to the stored app id and key handle and persist it.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as encryption key.
            credential_uuid: Registered credential uuid.
        Returns:
            BeginU2fAuthenticationResult: Credential uuid and authentication request.
        Assumptions:
            None.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialNotFoundError: If uuid is unknown.
            CredentialStateConflictError: If registration was not completed.
            CredentialInternalError: If stored values cannot be decrypted or persisted.
        Side Effects:
            Writes the updated account record.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        normalized_uuid = (credential_uuid or "").strip()
        credential = require_u2f_credential(account=account, credential_uuid=normalized_uuid)
        if not isinstance(credential, RegisteredU2fCredential):
            raise CredentialStateConflictError(message="U2F registration is not completed")

        app_id = self._access.decrypt(account=account, blob=credential.encrypted_app_id)
        key_handle = self._access.decrypt(account=account, blob=credential.encrypted_key_handle)
        challenge = self._protocol.build_authentication_challenge(
            app_id=app_id,
            key_handle=key_handle,
        )
        awaiting = credential.with_authentication_request(
            encrypted_request=self._access.encrypt(account=account, plaintext=challenge.to_json()),
        )
        self._access.save(
            record=account.record.with_u2f_credential(
                credential_uuid=normalized_uuid,
                credential=awaiting,
            )
        )
        log.info("u2f authentication started api_key=%s uuid=%s", account.api_key, normalized_uuid)
        return BeginU2fAuthenticationResult(uuid=normalized_uuid, challenge=challenge)
