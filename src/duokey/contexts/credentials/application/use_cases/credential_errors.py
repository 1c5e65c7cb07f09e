from __future__ import annotations

UNAUTHORIZED_MESSAGE = "Unauthorized"
U2F_NOT_FOUND_MESSAGE = "No U2F entry found with that uuid for that API Key."
INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class CredentialOperationError(ValueError):
    """
    CredentialOperationError — base application error of TOTP and U2F credential flows.

    Each subclass fixes one stable `code` and HTTP `status_code`, so the inbound adapter
    maps errors without inspecting messages.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/account_access.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/totp.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
    """

    def __init__(self, *, code: str, message: str, status_code: int) -> None:
        """
        Store error code, caller-facing message, and HTTP status.

        Args:
            code: Machine-readable error code.
            message: Caller-facing message; never contains secrets or challenges.
            status_code: HTTP status used by the inbound adapter.
        Returns:
            None.
        Assumptions:
            Subclasses choose the status; adapters do not remap it.
        Raises:
            None.
        Side Effects:
            None.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def payload(self) -> dict[str, str]:
        """Build `{"error": code, "message": message}` HTTP error payload."""
        return {"error": self.code, "message": self.message}


class CredentialUnauthorizedError(CredentialOperationError):
    """
    CredentialUnauthorizedError — API credentials missing, account unknown or not activated.

    Also raised for TOTP uuids absent from the account.
    """

    def __init__(self) -> None:
        super().__init__(code="unauthorized", message=UNAUTHORIZED_MESSAGE, status_code=401)


class CredentialNotFoundError(CredentialOperationError):
    """U2F uuid is not present in the account's `u2f` mapping."""

    def __init__(self) -> None:
        super().__init__(
            code="credential_not_found",
            message=U2F_NOT_FOUND_MESSAGE,
            status_code=404,
        )


class CredentialRequestInvalidError(CredentialOperationError):
    """
    CredentialRequestInvalidError — caller input is missing or malformed.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/verify_totp.py
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_registration.py
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(code="invalid_request", message=message, status_code=400)


class CredentialStateConflictError(CredentialOperationError):
    """
    CredentialStateConflictError — U2F credential is not in the state the operation needs.

    Examples: completing a registration twice, starting authentication before the device
    was registered, or submitting an authentication proof without an outstanding challenge.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(code="credential_state_conflict", message=message, status_code=409)


class U2fRegistrationFailedError(CredentialOperationError):
    """Device registration proof was rejected by the U2F protocol check."""

    def __init__(self, *, message: str) -> None:
        super().__init__(code="u2f_registration_failed", message=message, status_code=400)


class U2fAuthenticationFailedError(CredentialOperationError):
    """Device authentication proof was rejected by the U2F protocol check."""

    def __init__(self, *, message: str) -> None:
        super().__init__(code="u2f_authentication_failed", message=message, status_code=400)


class CredentialInternalError(CredentialOperationError):
    """
    CredentialInternalError — storage, encryption, or rendering failure.

    Details stay in server logs; callers only receive the generic message.
    """

    def __init__(self) -> None:
        super().__init__(code="internal_error", message=INTERNAL_ERROR_MESSAGE, status_code=500)
