from .account_store import PostgresAccountStore
from .gateway import CredentialsPostgresGateway, PsycopgCredentialsPostgresGateway

__all__ = [
    "CredentialsPostgresGateway",
    "PostgresAccountStore",
    "PsycopgCredentialsPostgresGateway",
]
