from __future__ import annotations

import logging

from duokey.contexts.credentials.application.ports import AccountStore, SecretEncryptor
from duokey.contexts.credentials.application.use_cases.account_access import (
    AccountAccess,
    require_u2f_credential,
)

log = logging.getLogger(__name__)


class DeleteU2fCredentialUseCase:
    """
    DeleteU2fCredentialUseCase — remove one U2F credential in any state.

    Related:
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
      - src/duokey/contexts/credentials/domain/entities/account_record.py
    """

    def __init__(self, *, store: AccountStore, encryptor: SecretEncryptor) -> None:
        self._access = AccountAccess(store=store, encryptor=encryptor)

    def delete(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        credential_uuid: str | None,
    ) -> None:
        """
        Drop the credential from the account and persist.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret.
            credential_uuid: U2F credential uuid.
        Returns:
            None.
        Assumptions:
            Nothing is decrypted, so the secret only has to be present.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialNotFoundError: If uuid is unknown.
            CredentialInternalError: If persistence fails.
        Side Effects:
            Writes the updated account record.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        normalized_uuid = (credential_uuid or "").strip()
        require_u2f_credential(account=account, credential_uuid=normalized_uuid)
        self._access.save(
            record=account.record.without_u2f_credential(credential_uuid=normalized_uuid),
        )
        log.info("u2f credential deleted api_key=%s uuid=%s", account.api_key, normalized_uuid)
