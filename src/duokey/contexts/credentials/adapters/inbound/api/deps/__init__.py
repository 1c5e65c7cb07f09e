from .api_credentials import (
    API_KEY_HEADER,
    API_SECRET_HEADER,
    ApiCredentials,
    ReadApiCredentialsDependency,
)

__all__ = [
    "API_KEY_HEADER",
    "API_SECRET_HEADER",
    "ApiCredentials",
    "ReadApiCredentialsDependency",
]
