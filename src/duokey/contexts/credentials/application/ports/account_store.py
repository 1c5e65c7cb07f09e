from __future__ import annotations

from typing import Protocol

from duokey.contexts.credentials.domain.entities import AccountRecord
from duokey.shared_kernel.primitives import ApiKey


class AccountStoreError(RuntimeError):
    """
    AccountStoreError — storage failure while reading or writing an account record.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/account_store.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
    """


class AccountStore(Protocol):
    """
    AccountStore — port to the external account record repository.

    Writes are whole-record overwrites without a version check: concurrent writers to
    the same account are last-writer-wins.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/persistence/in_memory/account_store.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/account_store.py
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
    """

    def get(self, *, api_key: ApiKey) -> AccountRecord | None:
        """
        Load account record snapshot by API key.

        Args:
            api_key: Account identifier.
        Returns:
            AccountRecord | None: Record snapshot or `None` when the account is unknown.
        Assumptions:
            Returned snapshot is detached from storage; mutating it has no effect.
        Raises:
            AccountStoreError: If storage read or document mapping fails.
        Side Effects:
            Reads one storage record.
        """
        ...

    def is_activated(self, *, record: AccountRecord) -> bool:
        """
        Tell whether the account finished provisioning and may use credentials.

        Args:
            record: Snapshot returned by `get`.
        Returns:
            bool: `True` for activated accounts.
        Assumptions:
            Activation policy belongs to the provisioning service.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...

    def put(self, *, record: AccountRecord) -> None:
        """
        Overwrite stored account record with given snapshot.

        Args:
            record: Full record snapshot to persist.
        Returns:
            None.
        Assumptions:
            No optimistic-concurrency token is checked.
        Raises:
            AccountStoreError: If storage write fails.
        Side Effects:
            Writes one storage record.
        """
        ...
