from __future__ import annotations

import logging
from typing import Any, Mapping

from duokey.contexts.credentials.application.ports import (
    AccountStore,
    SecretEncryptor,
    U2fProtocol,
    U2fProtocolError,
)
from duokey.contexts.credentials.application.use_cases.account_access import (
    AccountAccess,
    require_u2f_credential,
)
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialInternalError,
    CredentialStateConflictError,
    U2fRegistrationFailedError,
)
from duokey.contexts.credentials.application.use_cases.u2f_sign_result import coerce_sign_result
from duokey.contexts.credentials.domain.entities import PendingU2fRegistration
from duokey.contexts.credentials.domain.value_objects import U2fChallenge

log = logging.getLogger(__name__)


class CompleteU2fRegistrationUseCase:
    """
    CompleteU2fRegistrationUseCase — verify device registration and store its key pair.

    A credential leaves the pending state exactly once; a second completion is a
    state conflict.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_registration.py
      - src/duokey/contexts/credentials/domain/entities/u2f_credential.py
      - src/duokey/contexts/credentials/adapters/outbound/security/u2f/fido2_u2f_protocol.py
    """

    def __init__(
        self,
        *,
        store: AccountStore,
        encryptor: SecretEncryptor,
        protocol: U2fProtocol,
    ) -> None:
        if protocol is None:  # type: ignore[truthy-bool]
            raise ValueError("CompleteU2fRegistrationUseCase requires protocol")
        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._protocol = protocol

    def complete(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        credential_uuid: str | None,
        sign_result: Mapping[str, Any] | str | None,
    ) -> None:
        """
        Check registration proof against the stored challenge and register the device.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as encryption key.
            credential_uuid: Pending credential uuid.
            sign_result: Device `RegisterResponse` as mapping or JSON text.
        Returns:
            None.
        Assumptions:
            A failed proof leaves the pending challenge in place for a retry.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialNotFoundError: If uuid is unknown.
            CredentialStateConflictError: If credential is already registered.
            U2fRegistrationFailedError: If proof is malformed or rejected.
            CredentialInternalError: If stored values cannot be decrypted or persisted.
        Side Effects:
            Writes the updated account record on success.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        normalized_uuid = (credential_uuid or "").strip()
        credential = require_u2f_credential(account=account, credential_uuid=normalized_uuid)
        if not isinstance(credential, PendingU2fRegistration):
            raise CredentialStateConflictError(message="U2F credential is already registered")

        try:
            proof = coerce_sign_result(sign_result)
        except ValueError as error:
            raise U2fRegistrationFailedError(message=str(error)) from None

        stored_request = self._access.decrypt(
            account=account,
            blob=credential.encrypted_registration_request,
        )
        try:
            challenge = U2fChallenge.from_json(stored_request)
        except ValueError:
            log.exception(
                "stored u2f registration request is corrupted api_key=%s",
                account.api_key,
            )
            raise CredentialInternalError() from None

        try:
            registration = self._protocol.check_registration_proof(
                challenge=challenge,
                proof=proof,
            )
        except U2fProtocolError as error:
            log.info(
                "u2f registration rejected api_key=%s uuid=%s reason=%s",
                account.api_key,
                normalized_uuid,
                error,
            )
            raise U2fRegistrationFailedError(message=str(error)) from None

        registered = credential.register(
            encrypted_public_key=self._access.encrypt(
                account=account,
                plaintext=registration.public_key,
            ),
            encrypted_key_handle=self._access.encrypt(
                account=account,
                plaintext=registration.key_handle,
            ),
        )
        self._access.save(
            record=account.record.with_u2f_credential(
                credential_uuid=normalized_uuid,
                credential=registered,
            )
        )
        log.info("u2f registration completed api_key=%s uuid=%s", account.api_key, normalized_uuid)
