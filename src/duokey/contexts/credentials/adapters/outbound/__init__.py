from .persistence import (
    CredentialsPostgresGateway,
    InMemoryAccountStore,
    PostgresAccountStore,
    PsycopgCredentialsPostgresGateway,
)
from .rendering import QrCodePngRenderer
from .security import AesCtrSecretEncryptor, Fido2U2fProtocol, PyOtpTotpProvider
from .time import SystemCredentialsClock

__all__ = [
    "AesCtrSecretEncryptor",
    "CredentialsPostgresGateway",
    "Fido2U2fProtocol",
    "InMemoryAccountStore",
    "PostgresAccountStore",
    "PsycopgCredentialsPostgresGateway",
    "PyOtpTotpProvider",
    "QrCodePngRenderer",
    "SystemCredentialsClock",
]
