from .entities import (
    AccountRecord,
    PendingU2fRegistration,
    RegisteredU2fCredential,
    TotpCredential,
    U2fCredential,
)
from .services import allocate_credential_uuid
from .value_objects import U2F_VERSION_V2, U2fChallenge

__all__ = [
    "AccountRecord",
    "PendingU2fRegistration",
    "RegisteredU2fCredential",
    "TotpCredential",
    "U2F_VERSION_V2",
    "U2fChallenge",
    "U2fCredential",
    "allocate_credential_uuid",
]
