from .deps import ApiCredentials, ReadApiCredentialsDependency
from .routes import build_totp_router, build_u2f_router

__all__ = [
    "ApiCredentials",
    "ReadApiCredentialsDependency",
    "build_totp_router",
    "build_u2f_router",
]
