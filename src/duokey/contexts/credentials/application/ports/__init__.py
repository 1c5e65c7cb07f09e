from .account_store import AccountStore, AccountStoreError
from .clock import CredentialsClock
from .qr_code_renderer import QrCodeRenderer, QrCodeRenderError
from .secret_encryptor import EncryptedBlobFormatError, SecretCryptoError, SecretEncryptor
from .totp_provider import TotpProvider
from .u2f_protocol import (
    U2fAuthenticationResult,
    U2fProtocol,
    U2fProtocolError,
    U2fRegistrationResult,
)

__all__ = [
    "AccountStore",
    "AccountStoreError",
    "CredentialsClock",
    "EncryptedBlobFormatError",
    "QrCodeRenderError",
    "QrCodeRenderer",
    "SecretCryptoError",
    "SecretEncryptor",
    "TotpProvider",
    "U2fAuthenticationResult",
    "U2fProtocol",
    "U2fProtocolError",
    "U2fRegistrationResult",
]
