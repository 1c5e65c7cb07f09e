from .application import (
    BeginU2fAuthenticationUseCase,
    BeginU2fRegistrationUseCase,
    CompleteU2fAuthenticationUseCase,
    CompleteU2fRegistrationUseCase,
    CredentialOperationError,
    DeleteU2fCredentialUseCase,
    EnrollTotpUseCase,
    VerifyTotpUseCase,
)
from .domain import AccountRecord, PendingU2fRegistration, RegisteredU2fCredential, TotpCredential

__all__ = [
    "AccountRecord",
    "BeginU2fAuthenticationUseCase",
    "BeginU2fRegistrationUseCase",
    "CompleteU2fAuthenticationUseCase",
    "CompleteU2fRegistrationUseCase",
    "CredentialOperationError",
    "DeleteU2fCredentialUseCase",
    "EnrollTotpUseCase",
    "PendingU2fRegistration",
    "RegisteredU2fCredential",
    "TotpCredential",
    "VerifyTotpUseCase",
]
