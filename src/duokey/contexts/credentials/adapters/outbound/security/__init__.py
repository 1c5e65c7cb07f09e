from .encryption import AesCtrSecretEncryptor
from .totp import PyOtpTotpProvider
from .u2f import Fido2U2fProtocol

__all__ = [
    "AesCtrSecretEncryptor",
    "Fido2U2fProtocol",
    "PyOtpTotpProvider",
]
