from __future__ import annotations

from typing import Any, Mapping

import psycopg
import pytest

from duokey.contexts.credentials.adapters.outbound.persistence import PostgresAccountStore
from duokey.contexts.credentials.application.ports import AccountStoreError
from duokey.contexts.credentials.domain import AccountRecord, TotpCredential
from duokey.shared_kernel.primitives import ApiKey


class _FakeGateway:
    """
    Deterministic gateway stub recording SQL calls and returning canned rows.
    """

    def __init__(
        self,
        *,
        fetch_one_result: Mapping[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        """
        Initialize gateway stub.

        Args:
            fetch_one_result: Row returned by `fetch_one`.
            error: Optional exception raised by every call.
        Returns:
            None.
        Assumptions:
            Store issues at most one statement per operation.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._fetch_one_result = fetch_one_result
        self._error = error
        self.fetch_one_calls: list[tuple[str, Mapping[str, Any]]] = []
        self.execute_calls: list[tuple[str, Mapping[str, Any]]] = []

    def fetch_one(self, *, query: str, parameters: Mapping[str, Any]) -> Mapping[str, Any] | None:
        self.fetch_one_calls.append((query, parameters))
        if self._error is not None:
            raise self._error
        return self._fetch_one_result

    def execute(self, *, query: str, parameters: Mapping[str, Any]) -> None:
        self.execute_calls.append((query, parameters))
        if self._error is not None:
            raise self._error


def test_postgres_store_maps_row_and_trusts_row_key() -> None:
    """
    Verify `get` selects by API key and maps JSONB document into a record.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Row `api_key` column wins over any `id` inside the document.
    Raises:
        AssertionError: If SQL parameters or mapping are wrong.
    Side Effects:
        None.
    """
    gateway = _FakeGateway(
        fetch_one_result={
            "api_key": "key-1",
            "document": {
                "id": "stale-id",
                "activatedAt": "2026-01-01",
                "totp": {"t-1": {"encryptedTotpKey": "blob"}},
            },
        }
    )
    store = PostgresAccountStore(gateway=gateway)

    record = store.get(api_key=ApiKey("key-1"))

    assert record is not None
    assert str(record.api_key) == "key-1"
    assert store.is_activated(record=record) is True
    query, parameters = gateway.fetch_one_calls[0]
    assert "FROM credential_accounts" in query
    assert parameters == {"api_key": "key-1"}


def test_postgres_store_returns_none_for_missing_row() -> None:
    store = PostgresAccountStore(gateway=_FakeGateway())

    assert store.get(api_key=ApiKey("missing")) is None


def test_postgres_store_upserts_full_document() -> None:
    gateway = _FakeGateway()
    store = PostgresAccountStore(gateway=gateway, accounts_table="accounts_v2")
    record = _record()

    store.put(record=record)

    query, parameters = gateway.execute_calls[0]
    assert "INSERT INTO accounts_v2" in query
    assert "ON CONFLICT (api_key)" in query
    assert parameters["api_key"] == "key-1"
    assert parameters["document"].obj == {
        "id": "key-1",
        "activatedAt": "2026-01-01",
        "totp": {"t-1": {"encryptedTotpKey": "blob"}},
        "u2f": {},
    }


def test_postgres_store_wraps_driver_and_shape_errors() -> None:
    """
    Verify psycopg errors and malformed rows surface as `AccountStoreError`.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Use-cases translate `AccountStoreError` into internal errors.
    Raises:
        AssertionError: If raw driver or mapping errors leak.
    Side Effects:
        None.
    """
    failing = PostgresAccountStore(gateway=_FakeGateway(error=psycopg.OperationalError("down")))
    malformed = PostgresAccountStore(
        gateway=_FakeGateway(fetch_one_result={"api_key": "key-1", "document": "[]"})
    )
    invalid = PostgresAccountStore(
        gateway=_FakeGateway(
            fetch_one_result={"api_key": "key-1", "document": {"totp": {"t-1": {}}}}
        )
    )

    with pytest.raises(AccountStoreError, match="read failed"):
        failing.get(api_key=ApiKey("key-1"))
    with pytest.raises(AccountStoreError, match="write failed"):
        failing.put(record=_record())
    with pytest.raises(AccountStoreError, match="JSON object"):
        malformed.get(api_key=ApiKey("key-1"))
    with pytest.raises(AccountStoreError, match="malformed"):
        invalid.get(api_key=ApiKey("key-1"))


def test_postgres_store_rejects_blank_table_name() -> None:
    with pytest.raises(ValueError):
        PostgresAccountStore(gateway=_FakeGateway(), accounts_table=" ")


def _record() -> AccountRecord:
    return AccountRecord(
        api_key=ApiKey("key-1"),
        totp={"t-1": TotpCredential(encrypted_secret="blob")},
        attributes={"activatedAt": "2026-01-01"},
    )
