from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from duokey.contexts.credentials.adapters.outbound.persistence.account_document import (
    ACCOUNT_ID_FIELD,
    ACTIVATED_AT_FIELD,
    document_from_record,
    is_activated_document,
    record_from_document,
)
from duokey.contexts.credentials.application.ports.account_store import AccountStore
from duokey.contexts.credentials.domain.entities import AccountRecord
from duokey.shared_kernel.primitives import ApiKey


class InMemoryAccountStore(AccountStore):
    """
    InMemoryAccountStore — process-local account documents for dev runs and tests.

    Documents are deep-copied on every read and write so callers never share state
    with the store.

    Related:
      - src/duokey/contexts/credentials/application/ports/account_store.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/account_document.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/account_store.py
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    def add_account(
        self,
        *,
        api_key: str,
        activated: bool = True,
        activated_at: datetime | None = None,
    ) -> AccountRecord:
        """
        Provision an empty account document.

        Args:
            api_key: Account API key.
            activated: Whether to stamp `activatedAt`.
            activated_at: Optional activation time; defaults to now (UTC).
        Returns:
            AccountRecord: Snapshot of the stored account.
        Assumptions:
            Provisioning normally happens outside this service.
        Raises:
            ValueError: If API key is blank.
        Side Effects:
            Replaces any existing document for the key.
        """
        key = ApiKey(api_key)
        document: dict[str, Any] = {ACCOUNT_ID_FIELD: str(key), "totp": {}, "u2f": {}}
        if activated:
            moment = activated_at or datetime.now(timezone.utc)
            document[ACTIVATED_AT_FIELD] = moment.isoformat()
        self._documents[str(key)] = document
        return record_from_document(document=copy.deepcopy(document))

    def document(self, *, api_key: str) -> dict[str, Any] | None:
        """Return a copy of the raw stored document, `None` when absent."""
        stored = self._documents.get(api_key)
        return copy.deepcopy(stored) if stored is not None else None

    def get(self, *, api_key: ApiKey) -> AccountRecord | None:
        stored = self._documents.get(str(api_key))
        if stored is None:
            return None
        return record_from_document(document=copy.deepcopy(stored))

    def is_activated(self, *, record: AccountRecord) -> bool:
        return is_activated_document(attributes=record.attributes)

    def put(self, *, record: AccountRecord) -> None:
        self._documents[str(record.api_key)] = copy.deepcopy(document_from_record(record=record))
