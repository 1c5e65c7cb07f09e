from .account_access import (
    AccountAccess,
    AuthorizedAccount,
    require_totp_credential,
    require_u2f_credential,
)
from .begin_u2f_authentication import (
    BeginU2fAuthenticationResult,
    BeginU2fAuthenticationUseCase,
)
from .begin_u2f_registration import BeginU2fRegistrationResult, BeginU2fRegistrationUseCase
from .complete_u2f_authentication import (
    CompleteU2fAuthenticationResult,
    CompleteU2fAuthenticationUseCase,
)
from .complete_u2f_registration import CompleteU2fRegistrationUseCase
from .credential_errors import (
    CredentialInternalError,
    CredentialNotFoundError,
    CredentialOperationError,
    CredentialRequestInvalidError,
    CredentialStateConflictError,
    CredentialUnauthorizedError,
    U2fAuthenticationFailedError,
    U2fRegistrationFailedError,
)
from .delete_u2f_credential import DeleteU2fCredentialUseCase
from .enroll_totp import DEFAULT_TOTP_LABEL, EnrollTotpResult, EnrollTotpUseCase
from .verify_totp import CODE_REQUIRED_MESSAGE, VerifyTotpResult, VerifyTotpUseCase

__all__ = [
    "AccountAccess",
    "AuthorizedAccount",
    "BeginU2fAuthenticationResult",
    "BeginU2fAuthenticationUseCase",
    "BeginU2fRegistrationResult",
    "BeginU2fRegistrationUseCase",
    "CODE_REQUIRED_MESSAGE",
    "CompleteU2fAuthenticationResult",
    "CompleteU2fAuthenticationUseCase",
    "CompleteU2fRegistrationUseCase",
    "CredentialInternalError",
    "CredentialNotFoundError",
    "CredentialOperationError",
    "CredentialRequestInvalidError",
    "CredentialStateConflictError",
    "CredentialUnauthorizedError",
    "DEFAULT_TOTP_LABEL",
    "DeleteU2fCredentialUseCase",
    "EnrollTotpResult",
    "EnrollTotpUseCase",
    "U2fAuthenticationFailedError",
    "U2fRegistrationFailedError",
    "VerifyTotpResult",
    "VerifyTotpUseCase",
    "require_totp_credential",
    "require_u2f_credential",
]
