from .ports import (
    AccountStore,
    AccountStoreError,
    CredentialsClock,
    QrCodeRenderer,
    SecretEncryptor,
    TotpProvider,
    U2fProtocol,
)
from .use_cases import (
    BeginU2fAuthenticationUseCase,
    BeginU2fRegistrationUseCase,
    CompleteU2fAuthenticationUseCase,
    CompleteU2fRegistrationUseCase,
    CredentialOperationError,
    DeleteU2fCredentialUseCase,
    EnrollTotpUseCase,
    VerifyTotpUseCase,
)

__all__ = [
    "AccountStore",
    "AccountStoreError",
    "BeginU2fAuthenticationUseCase",
    "BeginU2fRegistrationUseCase",
    "CompleteU2fAuthenticationUseCase",
    "CompleteU2fRegistrationUseCase",
    "CredentialOperationError",
    "CredentialsClock",
    "DeleteU2fCredentialUseCase",
    "EnrollTotpUseCase",
    "QrCodeRenderer",
    "SecretEncryptor",
    "TotpProvider",
    "U2fProtocol",
    "VerifyTotpUseCase",
]
