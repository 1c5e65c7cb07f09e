"""
Credentials API routes (TOTP and U2F).
"""

from __future__ import annotations

from fastapi import APIRouter

from duokey.contexts.credentials.adapters.inbound.api.deps import ReadApiCredentialsDependency
from duokey.contexts.credentials.adapters.inbound.api.routes import (
    build_totp_router,
    build_u2f_router,
)
from duokey.contexts.credentials.application.use_cases import (
    BeginU2fAuthenticationUseCase,
    BeginU2fRegistrationUseCase,
    CompleteU2fAuthenticationUseCase,
    CompleteU2fRegistrationUseCase,
    DeleteU2fCredentialUseCase,
    EnrollTotpUseCase,
    VerifyTotpUseCase,
)


def build_credentials_router(
    *,
    enroll_totp: EnrollTotpUseCase,
    verify_totp: VerifyTotpUseCase,
    begin_u2f_registration: BeginU2fRegistrationUseCase,
    complete_u2f_registration: CompleteU2fRegistrationUseCase,
    begin_u2f_authentication: BeginU2fAuthenticationUseCase,
    complete_u2f_authentication: CompleteU2fAuthenticationUseCase,
    delete_u2f_credential: DeleteU2fCredentialUseCase,
    credentials_dependency: ReadApiCredentialsDependency,
) -> APIRouter:
    """
    Build credentials router facade for the FastAPI composition root.

    Related:
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/totp.py
      - src/duokey/contexts/credentials/adapters/inbound/api/routes/u2f.py
      - apps/api/wiring/modules/credentials.py

    Args:
        enroll_totp: TOTP enrollment use-case.
        verify_totp: TOTP verification use-case.
        begin_u2f_registration: U2F registration start use-case.
        complete_u2f_registration: U2F registration completion use-case.
        begin_u2f_authentication: U2F authentication start use-case.
        complete_u2f_authentication: U2F authentication completion use-case.
        delete_u2f_credential: U2F deletion use-case.
        credentials_dependency: Header credentials dependency.
    Returns:
        APIRouter: Router including TOTP and U2F sub-routers.
    Assumptions:
        None.
    Raises:
        ValueError: If one of the sub-router builders rejects a dependency.
    Side Effects:
        None.
    """
    router = APIRouter()
    router.include_router(
        build_totp_router(
            enroll_use_case=enroll_totp,
            verify_use_case=verify_totp,
            credentials_dependency=credentials_dependency,
        )
    )
    router.include_router(
        build_u2f_router(
            begin_registration_use_case=begin_u2f_registration,
            complete_registration_use_case=complete_u2f_registration,
            begin_authentication_use_case=begin_u2f_authentication,
            complete_authentication_use_case=complete_u2f_authentication,
            delete_use_case=delete_u2f_credential,
            credentials_dependency=credentials_dependency,
        )
    )
    return router
