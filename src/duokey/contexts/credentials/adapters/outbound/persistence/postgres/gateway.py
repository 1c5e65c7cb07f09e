from __future__ import annotations

from typing import Any, Mapping, Protocol, cast

import psycopg
from psycopg.rows import dict_row


class CredentialsPostgresGateway(Protocol):
    """
    CredentialsPostgresGateway — minimal SQL gateway used by the Postgres account store.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/account_store.py
      - alembic/versions/20260301_0001_credential_accounts.py
    """

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        """
        Execute SQL query and return first row as mapping.

        Args:
            query: SQL text.
            parameters: Bind parameters mapping.
        Returns:
            Mapping[str, Any] | None: One row or `None`.
        Assumptions:
            JSONB columns are returned as decoded Python values.
        Raises:
            Exception: Storage/driver exceptions from implementation.
        Side Effects:
            Executes one SQL statement.
        """
        ...

    def execute(self, *, query: str, parameters: Mapping[str, Any]) -> None:
        """
        Execute side-effecting SQL statement.

        Args:
            query: SQL text.
            parameters: Bind parameters mapping.
        Returns:
            None.
        Assumptions:
            Statement commits when the call returns.
        Raises:
            Exception: Storage/driver exceptions from implementation.
        Side Effects:
            Executes one SQL statement.
        """
        ...


class PsycopgCredentialsPostgresGateway(CredentialsPostgresGateway):
    """
    PsycopgCredentialsPostgresGateway — psycopg 3 gateway with one connection per statement.

    Related:
      - src/duokey/contexts/credentials/adapters/outbound/persistence/postgres/gateway.py
      - apps/api/wiring/modules/credentials.py
    """

    def __init__(self, *, dsn: str) -> None:
        normalized_dsn = dsn.strip()
        if not normalized_dsn:
            raise ValueError("PsycopgCredentialsPostgresGateway requires non-empty dsn")
        self._dsn = normalized_dsn

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        with psycopg.connect(self._dsn, row_factory=cast(Any, dict_row)) as connection:
            with connection.cursor() as cursor:
                cursor.execute(cast(Any, query), parameters)
                row = cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    def execute(self, *, query: str, parameters: Mapping[str, Any]) -> None:
        with psycopg.connect(self._dsn) as connection:
            connection.execute(cast(Any, query), parameters)
