from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import Request

API_KEY_HEADER = "X-Api-Key"
API_SECRET_HEADER = "X-Api-Secret"


@dataclass(frozen=True, slots=True)
class ApiCredentials:
    """
    ApiCredentials — raw API key and secret taken from request headers.

    Values are passed to use-cases unvalidated; the shared precondition chain decides
    whether they are acceptable.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/totp.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
    """

    api_key: str | None
    api_secret: str | None

    def __repr__(self) -> str:
        return f"ApiCredentials(api_key={self.api_key!r}, api_secret=***)"


class ReadApiCredentialsDependency:
    """
    ReadApiCredentialsDependency — FastAPI dependency reading API credentials headers.

    Related:
      - apps/api/wiring/modules/credentials.py
    """

    def __init__(
        self,
        *,
        key_header: str = API_KEY_HEADER,
        secret_header: str = API_SECRET_HEADER,
    ) -> None:
        """
        Initialize dependency with header names.

        Args:
            key_header: Header carrying the API key.
            secret_header: Header carrying the API secret.
        Returns:
            None.
        Assumptions:
            Header lookup is case-insensitive.
        Raises:
            ValueError: If a header name is blank.
        Side Effects:
            None.
        """
        if not key_header.strip():
            raise ValueError("ReadApiCredentialsDependency requires non-empty key_header")
        if not secret_header.strip():
            raise ValueError("ReadApiCredentialsDependency requires non-empty secret_header")
        self._key_header = key_header.strip()
        self._secret_header = secret_header.strip()

    def __call__(self, request: Request) -> ApiCredentials:
        return ApiCredentials(
            api_key=request.headers.get(self._key_header),
            api_secret=request.headers.get(self._secret_header),
        )
