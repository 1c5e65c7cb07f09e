from __future__ import annotations

import logging
from dataclasses import dataclass

from duokey.contexts.credentials.application.ports import AccountStore, SecretEncryptor, U2fProtocol
from duokey.contexts.credentials.application.use_cases.account_access import AccountAccess
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialRequestInvalidError,
)
from duokey.contexts.credentials.domain.entities import PendingU2fRegistration
from duokey.contexts.credentials.domain.services import allocate_credential_uuid
from duokey.contexts.credentials.domain.value_objects import U2fChallenge

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BeginU2fRegistrationResult:
    """New pending U2F credential uuid and the registration request for the device."""

    uuid: str
    challenge: U2fChallenge


class BeginU2fRegistrationUseCase:
    """
    BeginU2fRegistrationUseCase — open a pending U2F credential for a relying-party app id.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/complete_u2f_registration.py
      - src/duokey/contexts/credentials/application/ports/u2f_protocol.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
    """

    def __init__(
        self,
        *,
        store: AccountStore,
        encryptor: SecretEncryptor,
        protocol: U2fProtocol,
    ) -> None:
        if protocol is None:  # type: ignore[truthy-bool]
            raise ValueError("BeginU2fRegistrationUseCase requires protocol")
        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._protocol = protocol

    def begin(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        app_id: str | None,
    ) -> BeginU2fRegistrationResult:
        """
        Issue registration challenge and persist it encrypted with the app id.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as encryption key.
            app_id: Relying-party app id.
        Returns:
            BeginU2fRegistrationResult: Credential uuid and challenge.
        Assumptions:
            Several pending registrations per account may coexist.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialRequestInvalidError: If app id is missing or blank.
            CredentialInternalError: If encryption or persistence fails.
        Side Effects:
            Writes the updated account record.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        if app_id is None or not app_id.strip():
            raise CredentialRequestInvalidError(message="appId is required")
        normalized_app_id = app_id.strip()

        challenge = self._protocol.build_registration_challenge(app_id=normalized_app_id)
        credential_uuid = allocate_credential_uuid(existing_keys=account.record.u2f.keys())
        credential = PendingU2fRegistration(
            encrypted_app_id=self._access.encrypt(account=account, plaintext=normalized_app_id),
            encrypted_registration_request=self._access.encrypt(
                account=account,
                plaintext=challenge.to_json(),
            ),
        )
        self._access.save(
            record=account.record.with_u2f_credential(
                credential_uuid=credential_uuid,
                credential=credential,
            )
        )
        log.info("u2f registration started api_key=%s uuid=%s", account.api_key, credential_uuid)
        return BeginU2fRegistrationResult(uuid=credential_uuid, challenge=challenge)
