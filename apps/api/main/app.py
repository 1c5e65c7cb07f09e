"""
FastAPI application factory for the Duokey credentials API.
"""

from __future__ import annotations

import os
from typing import Mapping

from fastapi import FastAPI

from apps.api.common import register_api_error_handlers
from apps.api.wiring.modules import build_credentials_api_module
from duokey.contexts.credentials.application import AccountStore


def create_app(
    *,
    environ: Mapping[str, str] | None = None,
    store: AccountStore | None = None,
) -> FastAPI:
    """
    Build FastAPI app with the credentials module wired at startup.

    Related: apps.api.routes.credentials,
      apps.api.wiring.modules.credentials,
      apps.api.common.errors

    Args:
        environ: Optional environment mapping override.
        store: Optional account store override (tests, dev provisioning).
    Returns:
        FastAPI: Application instance with registered routers and error handlers.
    Assumptions:
        Module wiring performs fail-fast validation before first request.
    Raises:
        ValueError: If credentials runtime settings are invalid.
    Side Effects:
        None.
    """
    effective_environ = os.environ if environ is None else environ
    app = FastAPI(
        title="Duokey API",
        version="1.0.0",
    )
    register_api_error_handlers(app=app)
    credentials_module = build_credentials_api_module(environ=effective_environ, store=store)
    app.state.account_store = credentials_module.store
    app.include_router(credentials_module.router)
    return app
