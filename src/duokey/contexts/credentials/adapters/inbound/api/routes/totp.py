from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from duokey.contexts.credentials.adapters.inbound.api.deps.api_credentials import (
    ApiCredentials,
    ReadApiCredentialsDependency,
)
from duokey.contexts.credentials.application.use_cases import (
    CredentialOperationError,
    EnrollTotpUseCase,
    VerifyTotpUseCase,
)

INVALID_TOTP_CODE_PAYLOAD = {"error": "invalid_totp_code", "message": "Invalid"}


class TotpEnrollRequest(BaseModel):
    """Optional authenticator labelling for `POST /totp`."""

    issuer: str | None = None
    label: str | None = None


class TotpEnrollResponse(BaseModel):
    """
    TotpEnrollResponse — one-time enrollment payload with plaintext seed and QR image.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/enroll_totp.py
    """

    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    totp_key: str = Field(alias="totpKey")
    image_url: str = Field(alias="imageUrl")


class TotpValidateRequest(BaseModel):
    code: str | None = None


class ValidResponse(BaseModel):
    """Success verdict payload shared by TOTP and U2F validation endpoints."""

    message: str = "Valid"
    status: int = 200


def build_totp_router(
    *,
    enroll_use_case: EnrollTotpUseCase,
    verify_use_case: VerifyTotpUseCase,
    credentials_dependency: ReadApiCredentialsDependency,
) -> APIRouter:
    """
    Build router exposing TOTP enrollment and validation endpoints.

    Args:
        enroll_use_case: TOTP enrollment use-case.
        verify_use_case: TOTP verification use-case.
        credentials_dependency: Header credentials dependency.
    Returns:
        APIRouter: Router with `POST /totp` and `POST /totp/{uuid}/validate`.
    Assumptions:
        Use-case errors carry their HTTP status.
    Raises:
        ValueError: If required dependencies are missing.
    Side Effects:
        None.
    """
    if enroll_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_totp_router requires enroll_use_case")
    if verify_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_totp_router requires verify_use_case")
    if credentials_dependency is None:  # type: ignore[truthy-bool]
        raise ValueError("build_totp_router requires credentials_dependency")

    router = APIRouter(tags=["totp"])

    @router.post("/totp", response_model=TotpEnrollResponse)
    def post_totp(
        request: TotpEnrollRequest | None = Body(default=None),
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> TotpEnrollResponse:
        """
        Enroll a new TOTP credential and return its seed once.

        Args:
            request: Optional issuer/label payload.
            credentials: Header API credentials.
        Returns:
            TotpEnrollResponse: Credential uuid, seed, and QR data URI.
        Assumptions:
            Missing body means default label without issuer.
        Raises:
            HTTPException: 401/400/500 payload from use-case errors.
        Side Effects:
            Persists encrypted seed in the account store.
        """
        options = request or TotpEnrollRequest()
        try:
            result = enroll_use_case.enroll(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                label=options.label,
                issuer=options.issuer,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return TotpEnrollResponse(
            uuid=result.uuid,
            totp_key=result.totp_key,
            image_url=result.image_url,
        )

    @router.post("/totp/{uuid}/validate", response_model=ValidResponse)
    def post_totp_validate(
        uuid: str,
        request: TotpValidateRequest,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> ValidResponse:
        """
        Validate a TOTP code for one enrolled credential.

        Args:
            uuid: TOTP credential uuid.
            request: Code payload.
            credentials: Header API credentials.
        Returns:
            ValidResponse: `{"message": "Valid", "status": 200}`.
        Assumptions:
            Wrong codes answer 401 with `invalid_totp_code`.
        Raises:
            HTTPException: 400/401/500 payload.
        Side Effects:
            None.
        """
        try:
            result = verify_use_case.verify(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                credential_uuid=uuid,
                code=request.code,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        if not result.valid:
            raise HTTPException(status_code=401, detail=dict(INVALID_TOTP_CODE_PAYLOAD))
        return ValidResponse()

    return router
