from __future__ import annotations

import logging
from dataclasses import dataclass

from duokey.contexts.credentials.application.ports import (
    AccountStore,
    QrCodeRenderer,
    QrCodeRenderError,
    SecretEncryptor,
    TotpProvider,
)
from duokey.contexts.credentials.application.use_cases.account_access import AccountAccess
from duokey.contexts.credentials.application.use_cases.credential_errors import (
    CredentialInternalError,
    CredentialRequestInvalidError,
)
from duokey.contexts.credentials.domain.entities import TotpCredential
from duokey.contexts.credentials.domain.services import allocate_credential_uuid

log = logging.getLogger(__name__)

DEFAULT_TOTP_LABEL = "SecretKey"


@dataclass(frozen=True, slots=True)
class EnrollTotpResult:
    """
    EnrollTotpResult — one-time enrollment output shown to the account owner.

    `totp_key` is the only moment the plaintext seed leaves the service.

    Related:
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/totp.py
    """

    uuid: str
    totp_key: str
    image_url: str

    def __post_init__(self) -> None:
        if not self.uuid:
            raise ValueError("EnrollTotpResult.uuid must be non-empty")
        if not self.totp_key:
            raise ValueError("EnrollTotpResult.totp_key must be non-empty")
        if not self.image_url.startswith("data:image/"):
            raise ValueError("EnrollTotpResult.image_url must be an image data URI")

    def __repr__(self) -> str:
        return f"EnrollTotpResult(uuid={self.uuid!r})"


class EnrollTotpUseCase:
    """
    EnrollTotpUseCase — create a TOTP credential for an activated account.

    Related:
      - src/duokey/contexts/credentials/application/ports/totp_provider.py
      - src/duokey/contexts/credentials/application/ports/qr_code_renderer.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
    """

    def __init__(
        self,
        *,
        store: AccountStore,
        encryptor: SecretEncryptor,
        totp_provider: TotpProvider,
        qr_renderer: QrCodeRenderer,
        default_label: str = DEFAULT_TOTP_LABEL,
    ) -> None:
        """
        Initialize enrollment dependencies.

        Args:
            store: Account record store.
            encryptor: Per-request secret encryptor.
            totp_provider: Seed and provisioning URI provider.
            qr_renderer: QR image renderer for the provisioning URI.
            default_label: Label used when the caller omits one.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If a dependency is missing or default label is blank.
        Side Effects:
            None.
        """
        if totp_provider is None:  # type: ignore[truthy-bool]
            raise ValueError("EnrollTotpUseCase requires totp_provider")
        if qr_renderer is None:  # type: ignore[truthy-bool]
            raise ValueError("EnrollTotpUseCase requires qr_renderer")
        if not default_label.strip():
            raise ValueError("EnrollTotpUseCase requires non-empty default_label")

        self._access = AccountAccess(store=store, encryptor=encryptor)
        self._totp_provider = totp_provider
        self._qr_renderer = qr_renderer
        self._default_label = default_label.strip()

    def enroll(
        self,
        *,
        api_key: str | None,
        api_secret: str | None,
        label: str | None = None,
        issuer: str | None = None,
    ) -> EnrollTotpResult:
        """
        Generate seed, render its QR code, and store the seed encrypted under a new uuid.

        Args:
            api_key: Caller API key.
            api_secret: Caller API secret used as encryption key.
            label: Optional account label; defaults to configured label.
            issuer: Optional issuer shown by authenticator apps.
        Returns:
            EnrollTotpResult: New uuid, plaintext seed, and QR image data URI.
        Assumptions:
            A blank issuer is treated as absent.
        Raises:
            CredentialUnauthorizedError: If account preconditions fail.
            CredentialRequestInvalidError: If label or issuer contains `:`.
            CredentialInternalError: If encryption, rendering, or persistence fails.
        Side Effects:
            Writes the updated account record.
        """
        account = self._access.authorize(api_key=api_key, api_secret=api_secret)
        resolved_label = _resolve_label(label=label, default=self._default_label)
        resolved_issuer = _resolve_issuer(issuer=issuer)

        secret = self._totp_provider.create_secret()
        otpauth_uri = self._totp_provider.build_otpauth_uri(
            secret=secret,
            label=resolved_label,
            issuer=resolved_issuer,
        )
        try:
            image_url = self._qr_renderer.render_data_uri(content=otpauth_uri)
        except QrCodeRenderError:
            log.exception("totp qr rendering failed api_key=%s", account.api_key)
            raise CredentialInternalError() from None

        credential_uuid = allocate_credential_uuid(existing_keys=account.record.totp.keys())
        credential = TotpCredential(
            encrypted_secret=self._access.encrypt(account=account, plaintext=secret),
        )
        self._access.save(
            record=account.record.with_totp_credential(
                credential_uuid=credential_uuid,
                credential=credential,
            )
        )
        log.info("totp credential enrolled api_key=%s uuid=%s", account.api_key, credential_uuid)
        return EnrollTotpResult(uuid=credential_uuid, totp_key=secret, image_url=image_url)


def _resolve_label(*, label: str | None, default: str) -> str:
    if label is None or not label.strip():
        return default
    normalized = label.strip()
    if ":" in normalized:
        raise CredentialRequestInvalidError(message="label must not contain ':'")
    return normalized


def _resolve_issuer(*, issuer: str | None) -> str | None:
    if issuer is None or not issuer.strip():
        return None
    normalized = issuer.strip()
    if ":" in normalized:
        raise CredentialRequestInvalidError(message="issuer must not contain ':'")
    return normalized
