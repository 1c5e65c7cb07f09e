from .credentials import (
    CredentialsApiModule,
    CredentialsRuntimeSettings,
    build_credentials_api_module,
    resolve_credentials_runtime_settings,
)

__all__ = [
    "CredentialsApiModule",
    "CredentialsRuntimeSettings",
    "build_credentials_api_module",
    "resolve_credentials_runtime_settings",
]
