from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from duokey.contexts.credentials.application.ports import (
    AccountStore,
    CredentialsClock,
    SecretEncryptor,
    TotpProvider,
)
from duokey.contexts.credentials.application.use_cases.account_access import (
    AccountAccess,
    require_totp_credential,
)
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialInternalError,
    CredentialRequestInvalidError,
)

log = logging.getLogger(__name__)

CODE_REQUIRED_MESSAGE = "code (as a string) is required"


@dataclass(frozen=True, slots=True)
class VerifyTotpResult:
    """Verification verdict; `valid=False` is a normal outcome, not an error."""

    valid: bool


class VerifyTotpUseCase:
    """
    VerifyTotpUseCase — check a submitted TOTP code against a stored credential.

    Verification does not mutate state: a code stays acceptable for its whole window.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
      - src/duokey/contexts/credentials/application/ports/totp_provider.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/totp.py
    """

    def __init__(
        self,
        *,
        store: AccountStore,
        encryptor: SecretEncryptor,
        totp_provider: TotpProvider,
        clock: CredentialsClock,
    ) -> None:
        """
        Initialize verify use-case dependencies.

        Args:
            store: Account record store.
            encryptor: Per-request secret encryptor.
            totp_provider: TOTP verification provider.
            clock: UTC time source.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If required dependency is missing.
        Side Effects:
            None.
        """
        if totp_provider is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTotpUseCase requires totp_provider")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("VerifyTotpUseCase requires clock")

        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._totp_provider = totp_provider
        self._clock = clock

    def verify(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        credential_uuid: str | None,
        code: str | None,
    ) -> VerifyTotpResult:
        """
        Decrypt stored seed and compare code against neighbouring time steps.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as decryption key.
            credential_uuid: TOTP credential uuid returned at enrollment.
            code: Caller-submitted code.
        Returns:
            VerifyTotpResult: Verdict.
        Assumptions:
            Provider window is configured at wiring time.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail or uuid is unknown.
            CredentialRequestInvalidError: If code is missing or blank.
            CredentialInternalError: If stored seed cannot be decrypted or is corrupted.
        Side Effects:
            Reads the account record.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        credential = require_totp_credential(account=account, credential_uuid=credential_uuid)
        if code is None or not code.strip():
            raise CredentialRequestInvalidError(message=CODE_REQUIRED_MESSAGE)

        secret = self._access.decrypt(account=account, blob=credential.encrypted_secret)
        now = _ensure_utc_datetime(value=self._clock.now())
        try:
            valid = self._totp_provider.verify_code(secret=secret, code=code.strip(), at_time=now)
        except ValueError:
            log.exception("stored totp seed is unusable api_key=%s", account.api_key)
            raise CredentialInternalError() from None

        if not valid:
            log.info("totp code rejected api_key=%s uuid=%s", account.api_key, credential_uuid)
        return VerifyTotpResult(valid=valid)


def _ensure_utc_datetime(*, value: datetime) -> datetime:
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None or offset.total_seconds() != 0:
        raise ValueError("clock.now must be timezone-aware UTC datetime")
    return value
