from .totp import (
    TotpEnrollRequest,
    TotpEnrollResponse,
    TotpValidateRequest,
    ValidResponse,
    build_totp_router,
)
from .u2f import (
    U2fAuthenticationStartResponse,
    U2fRegistrationCompleteResponse,
    U2fRegistrationStartRequest,
    U2fRegistrationStartResponse,
    U2fSignResultRequest,
    build_u2f_router,
)

__all__ = [
    "TotpEnrollRequest",
    "TotpEnrollResponse",
    "TotpValidateRequest",
    "U2fAuthenticationStartResponse",
    "U2fRegistrationCompleteResponse",
    "U2fRegistrationStartRequest",
    "U2fRegistrationStartResponse",
    "U2fSignResultRequest",
    "ValidResponse",
    "build_totp_router",
    "build_u2f_router",
]
