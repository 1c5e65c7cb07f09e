from __future__ import annotations

import logging
from typing import Any, Mapping

import psycopg
from psycopg.types.json import Jsonb

from duokey.contexts.credentials.adapters.outbound.persistence.account_document import (
    document_from_record,
    is_activated_document,
    record_from_document,
)
from duokey.contexts.credentials.adapters.outbound.persistence.postgres.gateway import (
    CredentialsPostgresGateway,
)
from duokey.contexts.credentials.application.ports.account_store import (
    AccountStore,
    AccountStoreError,
)
from duokey.contexts.credentials.domain.entities import AccountRecord
from duokey.shared_kernel.primitives import ApiKey

log = logging.getLogger(__name__)


class PostgresAccountStore(AccountStore):
    """
    PostgresAccountStore — account documents kept as one JSONB row per API key.

    `put` is an unconditional upsert: concurrent writers to the same account are
    last-writer-wins.

    Related:
      - src/duokey/contexts/credentials/application/ports/account_store.py
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/gateway.py
      - alembic/versions/20260301_0001_credential_accounts.py
    """

    def __init__(
        self,
        *,
        gateway: CredentialsPostgresGateway,
        accounts_table: str = "credential_accounts",
    ) -> None:
        """
        Initialize store with SQL gateway and target table.

        Args:
            gateway: SQL gateway abstraction.
            accounts_table: Table holding `(api_key, document, updated_at)` rows.
        Returns:
            None.
        Assumptions:
            Table schema follows the `credential_accounts` Alembic migration.
        Raises:
            ValueError: If gateway is missing or table name is blank.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("PostgresAccountStore requires gateway")
        normalized_table = accounts_table.strip()
        if not normalized_table:
            raise ValueError("PostgresAccountStore requires non-empty table name")

        self._gateway = gateway
        self._table = normalized_table

    def get(self, *, api_key: ApiKey) -> AccountRecord | None:
        """
        Load account document by API key.

        Args:
            api_key: Account identifier.
        Returns:
            AccountRecord | None: Mapped snapshot or `None`.
        Assumptions:
            `api_key` is the table primary key.
        Raises:
            AccountStoreError: If query fails or the stored document is malformed.
        Side Effects:
            Executes one SQL SELECT statement.
        """
        query = f"""
        SELECT
            api_key,
            document
        FROM {self._table}
        WHERE api_key = %(api_key)s
        """
        try:
            row = self._gateway.fetch_one(query=query, parameters={"api_key": str(api_key)})
        except psycopg.Error as error:
            raise AccountStoreError(f"account read failed: {error}") from error
        if row is None:
            return None
        return _map_account_row(row=row)

    def is_activated(self, *, record: AccountRecord) -> bool:
        return is_activated_document(attributes=record.attributes)

    def put(self, *, record: AccountRecord) -> None:
        """
        Upsert full account document.

        Args:
            record: Record snapshot.
        Returns:
            None.
        Assumptions:
            No version column is compared.
        Raises:
            AccountStoreError: If statement fails.
        Side Effects:
            Executes one SQL upsert statement.
        """
        query = f"""
        INSERT INTO {self._table}
        (
            api_key,
            document,
            updated_at
        )
        VALUES
        (
            %(api_key)s,
            %(document)s,
            now()
        )
        ON CONFLICT (api_key)
        DO UPDATE
        SET
            document = EXCLUDED.document,
            updated_at = EXCLUDED.updated_at
        """
        try:
            self._gateway.execute(
                query=query,
                parameters={
                    "api_key": str(record.api_key),
                    "document": Jsonb(document_from_record(record=record)),
                },
            )
        except psycopg.Error as error:
            raise AccountStoreError(f"account write failed: {error}") from error
        log.debug("account document stored api_key=%s", record.api_key)


def _map_account_row(*, row: Mapping[str, Any]) -> AccountRecord:
    """
    Map SQL row into `AccountRecord`, trusting the row key over the document id.

    Args:
        row: Row with `api_key` and decoded `document` columns.
    Returns:
        AccountRecord: Mapped snapshot.
    Assumptions:
        psycopg decodes JSONB into Python dicts.
    Raises:
        AccountStoreError: If row or document shape is invalid.
    Side Effects:
        None.
    """
    document = row.get("document")
    if not isinstance(document, Mapping):
        raise AccountStoreError("account row document must be a JSON object")
    normalized = dict(document)
    normalized["id"] = str(row["api_key"])
    try:
        return record_from_document(document=normalized)
    except ValueError as error:
        raise AccountStoreError(f"account document is malformed: {error}") from error
