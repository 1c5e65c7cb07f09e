from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from duokey.contexts.credentials.domain.entities.totp_credential import TotpCredential
from duokey.contexts.credentials.domain.entities.u2f_credential import (
    PendingU2fRegistration,
    RegisteredU2fCredential,
    U2fCredential,
)
from duokey.shared_kernel.primitives import ApiKey


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """
    AccountRecord — snapshot of one account document with its credential mappings.

    The account store owns durability and the meaning of `attributes` (activation
    markers, provisioning fields). Use-cases only replace the `totp` and `u2f`
    mappings and write the whole record back.

    Related:
      - src/duokey/contexts/credentials/application/ports/account_store.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/account_document.py
      - src/duokey/contexts/credentials/domain/services/credential_uuid_allocator.py
    """

    api_key: ApiKey
    totp: Mapping[str, TotpCredential] = field(default_factory=dict)
    u2f: Mapping[str, U2fCredential] = field(default_factory=dict)
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """
        Validate credential mapping keys/values and store private mapping copies.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Credential keys are UUID strings allocated by this service.
        Raises:
            ValueError: If a key is blank or a value has an unexpected type.
        Side Effects:
            Replaces mapping slots with private dict copies.
        """
        for credential_uuid, totp_credential in self.totp.items():
            _require_uuid_key(kind="totp", credential_uuid=credential_uuid)
            if not isinstance(totp_credential, TotpCredential):
                raise ValueError(f"AccountRecord.totp[{credential_uuid!r}] has invalid type")
        for credential_uuid, u2f_credential in self.u2f.items():
            _require_uuid_key(kind="u2f", credential_uuid=credential_uuid)
            if not isinstance(u2f_credential, (PendingU2fRegistration, RegisteredU2fCredential)):
                raise ValueError(f"AccountRecord.u2f[{credential_uuid!r}] has invalid type")
        object.__setattr__(self, "totp", dict(self.totp))
        object.__setattr__(self, "u2f", dict(self.u2f))
        object.__setattr__(self, "attributes", dict(self.attributes))

    def find_totp_credential(self, *, credential_uuid: str) -> TotpCredential | None:
        return self.totp.get(credential_uuid)

    def find_u2f_credential(self, *, credential_uuid: str) -> U2fCredential | None:
        return self.u2f.get(credential_uuid)

    def with_totp_credential(
        self,
        *,
        credential_uuid: str,
        credential: TotpCredential,
    ) -> AccountRecord:
        """
        Return record with one TOTP credential added or replaced.

        Args:
            credential_uuid: Credential key within the `totp` mapping.
            credential: Encrypted TOTP credential.
        Returns:
            AccountRecord: New snapshot; `self` is unchanged.
        Assumptions:
            Caller allocated `credential_uuid` against existing `totp` keys.
        Raises:
            ValueError: If resulting record violates invariants.
        Side Effects:
            None.
        """
        updated = dict(self.totp)
        updated[credential_uuid] = credential
        return replace(self, totp=updated)

    def with_u2f_credential(
        self,
        *,
        credential_uuid: str,
        credential: U2fCredential,
    ) -> AccountRecord:
        """
        Return record with one U2F credential added or replaced.

        Args:
            credential_uuid: Credential key within the `u2f` mapping.
            credential: Pending or registered U2F credential.
        Returns:
            AccountRecord: New snapshot; `self` is unchanged.
        Assumptions:
            State transitions are decided by the calling use-case.
        Raises:
            ValueError: If resulting record violates invariants.
        Side Effects:
            None.
        """
        updated = dict(self.u2f)
        updated[credential_uuid] = credential
        return replace(self, u2f=updated)

    def without_u2f_credential(self, *, credential_uuid: str) -> AccountRecord:
        """
        Return record with one U2F credential removed.

        Args:
            credential_uuid: Credential key within the `u2f` mapping.
        Returns:
            AccountRecord: New snapshot without that key.
        Assumptions:
            Missing keys are a caller error.
        Raises:
            KeyError: If `credential_uuid` is absent.
        Side Effects:
            None.
        """
        updated = dict(self.u2f)
        del updated[credential_uuid]
        return replace(self, u2f=updated)


def _require_uuid_key(*, kind: str, credential_uuid: str) -> None:
    if not isinstance(credential_uuid, str) or not credential_uuid.strip():
        raise ValueError(f"AccountRecord.{kind} keys must be non-empty strings")
