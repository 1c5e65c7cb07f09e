from .account_record import AccountRecord
from .totp_credential import TotpCredential
from .u2f_credential import PendingU2fRegistration, RegisteredU2fCredential, U2fCredential

__all__ = [
    "AccountRecord",
    "PendingU2fRegistration",
    "RegisteredU2fCredential",
    "TotpCredential",
    "U2fCredential",
]
