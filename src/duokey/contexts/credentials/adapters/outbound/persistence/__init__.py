from .account_document import document_from_record, is_activated_document, record_from_document
from .in_memory import InMemoryAccountStore
from .postgres import (
    CredentialsPostgresGateway,
    PostgresAccountStore,
    PsycopgCredentialsPostgresGateway,
)

__all__ = [
    "CredentialsPostgresGateway",
    "InMemoryAccountStore",
    "PostgresAccountStore",
    "PsycopgCredentialsPostgresGateway",
    "document_from_record",
    "is_activated_document",
    "record_from_document",
]
