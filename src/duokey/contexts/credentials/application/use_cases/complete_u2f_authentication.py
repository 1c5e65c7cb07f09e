from __future__ import annotations

import logging
from dataclasses import dataclass
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
    U2fAuthenticationFailedError,
)
from duokey.contexts.credentials.application.use_cases.u2f_sign_result import coerce_sign_result
from duokey.contexts.credentials.domain.entities import RegisteredU2fCredential
from duokey.contexts.credentials.domain.value_objects import U2fChallenge

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompleteU2fAuthenticationResult:
    """
    CompleteU2fAuthenticationResult — accepted authentication proof.

    Related:
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
    """

    valid: bool
    counter: int


class CompleteU2fAuthenticationUseCase:
    """
    CompleteU2fAuthenticationUseCase — verify a device signature for the outstanding challenge.

    The outstanding challenge is consumed and persisted before the verdict, so each
    challenge can be answered once whether the proof is accepted or not.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_authentication.py
      - src/duokey/contexts/credentials/application/ports/u2f_protocol.py
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
            raise ValueError("CompleteU2fAuthenticationUseCase requires protocol")
        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._protocol = protocol

    def complete(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        credential_uuid: str | None,
        sign_result: Mapping[str, Any] | str | None,
    ) -> CompleteU2fAuthenticationResult:
        """
        Consume the outstanding challenge and check the device signature.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as encryption key.
            credential_uuid: Registered credential uuid.
            sign_result: Device `SignResponse` as mapping or JSON text.
        Returns:
            CompleteU2fAuthenticationResult: Accepted verdict with signature counter.
        Assumptions:
            Counter regression is not treated as cloning evidence.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialNotFoundError: If uuid is unknown.
            CredentialStateConflictError: If no authentication challenge is outstanding.
            U2fAuthenticationFailedError: If proof is malformed or rejected.
            CredentialInternalError: If stored values cannot be decrypted or persisted.
        Side Effects:
            Writes the account record with the challenge cleared.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        normalized_uuid = (credential_uuid or "").strip()
        credential = require_u2f_credential(account=account, credential_uuid=normalized_uuid)
        if (
            not isinstance(credential, RegisteredU2fCredential)
            or credential.encrypted_authentication_request is None
        ):
            raise CredentialStateConflictError(message="No U2F authentication request is pending")

        stored_request = self._access.decrypt(
            account=account,
            blob=credential.encrypted_authentication_request,
        )
        public_key = self._access.decrypt(account=account, blob=credential.encrypted_public_key)
        try:
            challenge = U2fChallenge.from_json(stored_request)
        except ValueError:
            log.exception(
                "stored u2f authentication request is corrupted api_key=%s",
                account.api_key,
            )
            raise CredentialInternalError() from None

        self._access.save(
            record=account.record.with_u2f_credential(
                credential_uuid=normalized_uuid,
                credential=credential.without_authentication_request(),
            )
        )

        try:
            proof = coerce_sign_result(sign_result)
            verdict = self._protocol.check_authentication_proof(
                challenge=challenge,
                proof=proof,
                public_key=public_key,
            )
        except (U2fProtocolError, ValueError) as error:
            log.info(
                "u2f authentication rejected api_key=%s uuid=%s reason=%s",
                account.api_key,
                normalized_uuid,
                error,
            )
            raise U2fAuthenticationFailedError(message=str(error)) from None

        log.info(
            "u2f authentication completed api_key=%s uuid=%s counter=%s",
            account.api_key,
            normalized_uuid,
            verdict.counter,
        )
        return CompleteU2fAuthenticationResult(valid=True, counter=verdict.counter)
