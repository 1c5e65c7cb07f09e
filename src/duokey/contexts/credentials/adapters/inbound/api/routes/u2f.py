from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from duokey.contexts.credentials.adapters.inbound.api.deps.api_credentials import (
    ApiCredentials,
    ReadApiCredentialsDependency,
)
from duokey.contexts.credentials.adapters.inbound.api.routes.totp import ValidResponse
from duokey.contexts.credentials.application.use_cases import (
    BeginU2fAuthenticationUseCase,
    BeginU2fRegistrationUseCase,
    CompleteU2fAuthenticationUseCase,
    CompleteU2fRegistrationUseCase,
    CredentialOperationError,
    DeleteU2fCredentialUseCase,
)


class U2fRegistrationStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_id: str | None = Field(default=None, alias="appId")


class U2fRegisterRequestModel(BaseModel):
    """U2F JavaScript API `RegisterRequest` as returned to the browser."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    app_id: str = Field(alias="appId")
    challenge: str


class U2fRegistrationStartResponse(BaseModel):
    uuid: str
    challenge: U2fRegisterRequestModel


class U2fSignResultRequest(BaseModel):
    """
    U2fSignResultRequest — device response forwarded by the client.

    `signResult` may be the response object itself or its JSON text.
    """

    model_config = ConfigDict(populate_by_name=True)

    sign_result: dict[str, Any] | str | None = Field(default=None, alias="signResult")


class U2fRegistrationCompleteResponse(BaseModel):
    uuid: str
    registered: bool = True


class U2fAuthenticationStartResponse(BaseModel):
    """
    U2fAuthenticationStartResponse — `SignRequest` fields plus the credential uuid.

    Related:
      - src/duokey/contexts/credentials/application/use_cases/begin_u2f_authentication.py
    """

    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    version: str
    challenge: str
    app_id: str = Field(alias="appId")
    key_handle: str = Field(alias="keyHandle")


def build_u2f_router(
    *,
    begin_registration_use_case: BeginU2fRegistrationUseCase,
    complete_registration_use_case: CompleteU2fRegistrationUseCase,
    begin_authentication_use_case: BeginU2fAuthenticationUseCase,
    complete_authentication_use_case: CompleteU2fAuthenticationUseCase,
    delete_use_case: DeleteU2fCredentialUseCase,
    credentials_dependency: ReadApiCredentialsDependency,
) -> APIRouter:
    """
    Build router exposing the U2F registration, authentication, and deletion endpoints.

    Args:
        begin_registration_use_case: Registration start use-case.
        complete_registration_use_case: Registration completion use-case.
        begin_authentication_use_case: Authentication start use-case.
        complete_authentication_use_case: Authentication completion use-case.
        delete_use_case: Credential deletion use-case.
        credentials_dependency: Header credentials dependency.
    Returns:
        APIRouter: Router with `/u2f/...` endpoints.
    Assumptions:
        Use-case errors carry their HTTP status.
    Raises:
        ValueError: If required dependencies are missing.
    Side Effects:
        None.
    """
    if begin_registration_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires begin_registration_use_case")
    if complete_registration_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires complete_registration_use_case")
    if begin_authentication_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires begin_authentication_use_case")
    if complete_authentication_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires complete_authentication_use_case")
    if delete_use_case is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires delete_use_case")
    if credentials_dependency is None:  # type: ignore[truthy-bool]
        raise ValueError("build_u2f_router requires credentials_dependency")

    router = APIRouter(tags=["u2f"])

    @router.post("/u2f/registrations", response_model=U2fRegistrationStartResponse)
    def post_u2f_registration(
        request: U2fRegistrationStartRequest,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> U2fRegistrationStartResponse:
        """
        Open a pending U2F credential and return the device registration request.

        Args:
            request: Payload with relying-party `appId`.
            credentials: Header API credentials.
        Returns:
            U2fRegistrationStartResponse: Credential uuid and `RegisterRequest`.
        Assumptions:
            None.
        Raises:
            HTTPException: 400/401/500 payload.
        Side Effects:
            Persists encrypted app id and challenge.
        """
        try:
            result = begin_registration_use_case.begin(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                app_id=request.app_id,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return U2fRegistrationStartResponse(
            uuid=result.uuid,
            challenge=U2fRegisterRequestModel(
                version=result.challenge.version,
                app_id=result.challenge.app_id,
                challenge=result.challenge.challenge,
            ),
        )

    @router.post(
        "/u2f/{uuid}/registration/validate",
        response_model=U2fRegistrationCompleteResponse,
    )
    def post_u2f_registration_validate(
        uuid: str,
        request: U2fSignResultRequest,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> U2fRegistrationCompleteResponse:
        try:
            complete_registration_use_case.complete(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                credential_uuid=uuid,
                sign_result=request.sign_result,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return U2fRegistrationCompleteResponse(uuid=uuid)

    @router.post("/u2f/{uuid}/authentications", response_model=U2fAuthenticationStartResponse)
    def post_u2f_authentication(
        uuid: str,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> U2fAuthenticationStartResponse:
        """
        Issue a single-use authentication challenge for a registered credential.

        Args:
            uuid: Registered credential uuid.
            credentials: Header API credentials.
        Returns:
            U2fAuthenticationStartResponse: `SignRequest` fields with uuid.
        Assumptions:
            A new challenge replaces any outstanding one.
        Raises:
            HTTPException: 401/404/409/500 payload.
        Side Effects:
            Persists encrypted challenge.
        """
        try:
            result = begin_authentication_use_case.begin(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                credential_uuid=uuid,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return U2fAuthenticationStartResponse(
            uuid=result.uuid,
            version=result.challenge.version,
            challenge=result.challenge.challenge,
            app_id=result.challenge.app_id,
            key_handle=result.challenge.key_handle or "",
        )

    @router.post("/u2f/{uuid}/authentication/validate", response_model=ValidResponse)
    def post_u2f_authentication_validate(
        uuid: str,
        request: U2fSignResultRequest,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> ValidResponse:
        try:
            complete_authentication_use_case.complete(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                credential_uuid=uuid,
                sign_result=request.sign_result,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return ValidResponse()

    @router.delete("/u2f/{uuid}", status_code=204)
    def delete_u2f_credential(
        uuid: str,
        credentials: ApiCredentials = Depends(credentials_dependency),
    ) -> Response:
        try:
            delete_use_case.delete(
                api_key=credentials.api_key,
                api_secret=credentials.api_secret,
                credential_uuid=uuid,
            )
        except CredentialOperationError as error:
            raise HTTPException(
                status_code=error.status_code,
                detail=error.payload(),
            ) from error
        return Response(status_code=204)

    return router
