from __future__ import annotations

from typing import Any, Mapping

from duokey.contexts.credentials.domain.entities import (
    AccountRecord,
    PendingU2fRegistration,
    RegisteredU2fCredential,
    TotpCredential,
    U2fCredential,
)
from duokey.shared_kernel.primitives import ApiKey

ACCOUNT_ID_FIELD = "id"
ACTIVATED_AT_FIELD = "activatedAt"
TOTP_FIELD = "totp"
U2F_FIELD = "u2f"

_ENCRYPTED_TOTP_KEY = "encryptedTotpKey"
_ENCRYPTED_APP_ID = "encryptedAppId"
_ENCRYPTED_REGISTRATION_REQUEST = "encryptedRegistrationRequest"
_ENCRYPTED_PUBLIC_KEY = "encryptedPublicKey"
_ENCRYPTED_KEY_HANDLE = "encryptedKeyHandle"
_ENCRYPTED_AUTHENTICATION_REQUEST = "encryptedAuthenticationRequest"


def record_from_document(*, document: Mapping[str, Any]) -> AccountRecord:
    """
    Map stored account document into `AccountRecord`.

    Args:
        document: Account document with `id`, optional `totp` and `u2f` maps, and
            provisioning attributes such as `activatedAt`.
    Returns:
        AccountRecord: Record snapshot; unknown top-level fields land in `attributes`.
    Assumptions:
        A blank (`" "`) authentication request means "no pending request".
    Raises:
        ValueError: If document shape is invalid.
    Side Effects:
        None.
    """
    if not isinstance(document, Mapping):
        raise ValueError("account document must be an object")
    api_key = document.get(ACCOUNT_ID_FIELD)
    if not isinstance(api_key, str):
        raise ValueError("account document id must be a string")

    totp = {
        credential_uuid: _totp_from_entry(credential_uuid=credential_uuid, entry=entry)
        for credential_uuid, entry in _section(document=document, name=TOTP_FIELD).items()
    }
    u2f = {
        credential_uuid: _u2f_from_entry(credential_uuid=credential_uuid, entry=entry)
        for credential_uuid, entry in _section(document=document, name=U2F_FIELD).items()
    }
    attributes = {
        key: value
        for key, value in document.items()
        if key not in (ACCOUNT_ID_FIELD, TOTP_FIELD, U2F_FIELD)
    }
    return AccountRecord(api_key=ApiKey(api_key), totp=totp, u2f=u2f, attributes=attributes)


def document_from_record(*, record: AccountRecord) -> dict[str, Any]:
    """
    Map `AccountRecord` into the stored account document shape.

    Args:
        record: Record snapshot.
    Returns:
        dict[str, Any]: JSON-compatible account document.
    Assumptions:
        Attributes are JSON-compatible and never override `id`, `totp`, or `u2f`.
    Raises:
        None.
    Side Effects:
        None.
    """
    document: dict[str, Any] = dict(record.attributes)
    document[ACCOUNT_ID_FIELD] = str(record.api_key)
    document[TOTP_FIELD] = {
        credential_uuid: {_ENCRYPTED_TOTP_KEY: credential.encrypted_secret}
        for credential_uuid, credential in record.totp.items()
    }
    document[U2F_FIELD] = {
        credential_uuid: _u2f_to_entry(credential=credential)
        for credential_uuid, credential in record.u2f.items()
    }
    return document


def is_activated_document(*, attributes: Mapping[str, Any]) -> bool:
    """Account counts as activated once provisioning stamped a non-empty `activatedAt`."""
    activated_at = attributes.get(ACTIVATED_AT_FIELD)
    if isinstance(activated_at, str):
        return bool(activated_at.strip())
    return activated_at is not None and activated_at is not False


def _section(*, document: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = document.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"account document {name} must be an object")
    return section


def _totp_from_entry(*, credential_uuid: str, entry: Any) -> TotpCredential:
    if not isinstance(entry, Mapping):
        raise ValueError(f"totp entry {credential_uuid!r} must be an object")
    return TotpCredential(encrypted_secret=_text(entry=entry, name=_ENCRYPTED_TOTP_KEY))


def _u2f_from_entry(*, credential_uuid: str, entry: Any) -> U2fCredential:
    """
    Decode one U2F entry into its pending or registered variant.

    Args:
        credential_uuid: Entry key, used in error messages.
        entry: Stored entry object.
    Returns:
        U2fCredential: Pending registration or registered credential.
    Assumptions:
        Exactly one of registration request and public key is present.
    Raises:
        ValueError: If the entry matches neither variant or both at once.
    Side Effects:
        None.
    """
    if not isinstance(entry, Mapping):
        raise ValueError(f"u2f entry {credential_uuid!r} must be an object")
    app_id = _text(entry=entry, name=_ENCRYPTED_APP_ID)
    registration_request = _optional_text(entry=entry, name=_ENCRYPTED_REGISTRATION_REQUEST)
    public_key = _optional_text(entry=entry, name=_ENCRYPTED_PUBLIC_KEY)

    if registration_request is not None and public_key is not None:
        raise ValueError(f"u2f entry {credential_uuid!r} is both pending and registered")
    if registration_request is not None:
        return PendingU2fRegistration(
            encrypted_app_id=app_id,
            encrypted_registration_request=registration_request,
        )
    if public_key is None:
        raise ValueError(f"u2f entry {credential_uuid!r} has neither request nor public key")
    return RegisteredU2fCredential(
        encrypted_app_id=app_id,
        encrypted_public_key=public_key,
        encrypted_key_handle=_text(entry=entry, name=_ENCRYPTED_KEY_HANDLE),
        encrypted_authentication_request=_optional_text(
            entry=entry,
            name=_ENCRYPTED_AUTHENTICATION_REQUEST,
        ),
    )


def _u2f_to_entry(*, credential: U2fCredential) -> dict[str, str]:
    if isinstance(credential, PendingU2fRegistration):
        return {
            _ENCRYPTED_APP_ID: credential.encrypted_app_id,
            _ENCRYPTED_REGISTRATION_REQUEST: credential.encrypted_registration_request,
        }
    entry = {
        _ENCRYPTED_APP_ID: credential.encrypted_app_id,
        _ENCRYPTED_PUBLIC_KEY: credential.encrypted_public_key,
        _ENCRYPTED_KEY_HANDLE: credential.encrypted_key_handle,
    }
    if credential.encrypted_authentication_request is not None:
        entry[_ENCRYPTED_AUTHENTICATION_REQUEST] = credential.encrypted_authentication_request
    return entry


def _text(*, entry: Mapping[str, Any], name: str) -> str:
    value = _optional_text(entry=entry, name=name)
    if value is None:
        raise ValueError(f"credential field {name} is required")
    return value


def _optional_text(*, entry: Mapping[str, Any], name: str) -> str | None:
    value = entry.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"credential field {name} must be a string")
    if not value.strip():
        return None
    return value
