"""
Composition helpers for the credentials API module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from fastapi import APIRouter

from apps.api.routes import build_credentials_router
from duokey.contexts.credentials.adapters.inbound.api.deps import ReadApiCredentialsDependency
from duokey.contexts.credentials.adapters.outbound import (
    AesCtrSecretEncryptor,
    Fido2U2fProtocol,
    InMemoryAccountStore,
    PostgresAccountStore,
    PsycopgCredentialsPostgresGateway,
    PyOtpTotpProvider,
    QrCodePngRenderer,
    SystemCredentialsClock,
)
from duokey.contexts.credentials.application import AccountStore
from duokey.contexts.credentials.application.use_cases import (
    DEFAULT_TOTP_LABEL,
    BeginU2fAuthenticationUseCase,
    BeginU2fRegistrationUseCase,
    CompleteU2fAuthenticationUseCase,
    CompleteU2fRegistrationUseCase,
    DeleteU2fCredentialUseCase,
    EnrollTotpUseCase,
    VerifyTotpUseCase,
)

log = logging.getLogger(__name__)

_ENV_NAME_KEY = "DUOKEY_ENV"
_CREDENTIALS_FAIL_FAST_KEY = "CREDENTIALS_FAIL_FAST"
_CREDENTIALS_PG_DSN_KEY = "CREDENTIALS_PG_DSN"
_CREDENTIALS_ACCOUNTS_TABLE_KEY = "CREDENTIALS_ACCOUNTS_TABLE"
_CREDENTIALS_DEV_API_KEYS_KEY = "CREDENTIALS_DEV_API_KEYS"
_TOTP_VALID_WINDOW_KEY = "TOTP_VALID_WINDOW"
_TOTP_PERIOD_SECONDS_KEY = "TOTP_PERIOD_SECONDS"
_TOTP_DEFAULT_LABEL_KEY = "TOTP_DEFAULT_LABEL"
_ALLOWED_ENVS = ("dev", "prod", "test")


@dataclass(frozen=True, slots=True)
class CredentialsRuntimeSettings:
    """
    CredentialsRuntimeSettings — runtime policy for credentials API wiring.

    Related:
      - apps/api/wiring/modules/credentials.py
      - apps/api/main/app.py
    """

    env_name: str
    fail_fast: bool
    postgres_dsn: str
    accounts_table: str
    dev_api_keys: tuple[str, ...]
    totp_valid_window: int
    totp_period_seconds: int
    totp_default_label: str

    def __post_init__(self) -> None:
        """
        Validate runtime settings invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Values are normalized by the resolver.
        Raises:
            ValueError: If one of invariants is violated.
        Side Effects:
            None.
        """
        if self.env_name not in _ALLOWED_ENVS:
            raise ValueError(
                f"CredentialsRuntimeSettings.env_name must be one of {_ALLOWED_ENVS}, "
                f"got {self.env_name!r}"
            )
        if self.fail_fast and not self.postgres_dsn:
            raise ValueError(
                f"{_CREDENTIALS_PG_DSN_KEY} must be set when {_CREDENTIALS_FAIL_FAST_KEY}=true"
            )
        if not self.accounts_table:
            raise ValueError("CredentialsRuntimeSettings.accounts_table must be non-empty")
        if self.dev_api_keys and self.env_name == "prod":
            raise ValueError(f"{_CREDENTIALS_DEV_API_KEYS_KEY} is not allowed when DUOKEY_ENV=prod")
        if self.totp_valid_window < 0:
            raise ValueError("CredentialsRuntimeSettings.totp_valid_window must be >= 0")
        if self.totp_period_seconds <= 0:
            raise ValueError("CredentialsRuntimeSettings.totp_period_seconds must be > 0")
        if not self.totp_default_label or ":" in self.totp_default_label:
            raise ValueError(
                "CredentialsRuntimeSettings.totp_default_label must be non-empty without ':'"
            )


@dataclass(frozen=True, slots=True)
class CredentialsApiModule:
    """
    CredentialsApiModule — wired router plus the store it writes to.

    `store` is exposed so tests can provision accounts; dev runs seed it through
    `CREDENTIALS_DEV_API_KEYS`.
    """

    router: APIRouter
    store: AccountStore
    settings: CredentialsRuntimeSettings


def build_credentials_api_module(
    *,
    environ: Mapping[str, str],
    store: AccountStore | None = None,
) -> CredentialsApiModule:
    """
    Build fully wired credentials module from environment settings.

    Args:
        environ: Runtime environment mapping.
        store: Optional store override; defaults to Postgres when a DSN is configured
            and to the in-memory store otherwise.
    Returns:
        CredentialsApiModule: Router, store, and resolved settings.
    Assumptions:
        Fail-fast validation happens before the first request.
    Raises:
        ValueError: If settings are invalid.
    Side Effects:
        None.
    """
    settings = resolve_credentials_runtime_settings(environ=environ)
    effective_store = store if store is not None else _build_account_store(settings=settings)
    encryptor = AesCtrSecretEncryptor()
    totp_provider = PyOtpTotpProvider(
        period_seconds=settings.totp_period_seconds,
        valid_window=settings.totp_valid_window,
    )
    protocol = Fido2U2fProtocol()

    router = build_credentials_router(
        enroll_totp=EnrollTotpUseCase(
            store=effective_store,
            encryptor=encryptor,
            totp_provider=totp_provider,
            qr_renderer=QrCodePngRenderer(),
            default_label=settings.totp_default_label,
        ),
        verify_totp=VerifyTotpUseCase(
            store=effective_store,
            encryptor=encryptor,
            totp_provider=totp_provider,
            clock=SystemCredentialsClock(),
        ),
        begin_u2f_registration=BeginU2fRegistrationUseCase(
            store=effective_store,
            encryptor=encryptor,
            protocol=protocol,
        ),
        complete_u2f_registration=CompleteU2fRegistrationUseCase(
            store=effective_store,
            encryptor=encryptor,
            protocol=protocol,
        ),
        begin_u2f_authentication=BeginU2fAuthenticationUseCase(
            store=effective_store,
            encryptor=encryptor,
            protocol=protocol,
        ),
        complete_u2f_authentication=CompleteU2fAuthenticationUseCase(
            store=effective_store,
            encryptor=encryptor,
            protocol=protocol,
        ),
        delete_u2f_credential=DeleteU2fCredentialUseCase(
            store=effective_store,
            encryptor=encryptor,
        ),
        credentials_dependency=ReadApiCredentialsDependency(),
    )
    log.info(
        "credentials module wired env=%s store=%s",
        settings.env_name,
        type(effective_store).__name__,
    )
    return CredentialsApiModule(router=router, store=effective_store, settings=settings)


def _build_account_store(*, settings: CredentialsRuntimeSettings) -> AccountStore:
    if settings.postgres_dsn:
        gateway = PsycopgCredentialsPostgresGateway(dsn=settings.postgres_dsn)
        return PostgresAccountStore(gateway=gateway, accounts_table=settings.accounts_table)
    store = InMemoryAccountStore()
    for api_key in settings.dev_api_keys:
        store.add_account(api_key=api_key)
    if settings.dev_api_keys:
        log.info("in-memory store seeded with %s activated accounts", len(settings.dev_api_keys))
    return store


def resolve_credentials_runtime_settings(
    *,
    environ: Mapping[str, str],
) -> CredentialsRuntimeSettings:
    """
    Resolve credentials runtime settings with fail-fast policy and defaults.

    Args:
        environ: Runtime environment mapping.
    Returns:
        CredentialsRuntimeSettings: Validated settings.
    Assumptions:
        Missing `DUOKEY_ENV` defaults to `dev`.
    Raises:
        ValueError: If values are invalid or fail-fast requires a missing DSN.
    Side Effects:
        None.
    """
    env_name = _resolve_env_name(environ=environ)
    return CredentialsRuntimeSettings(
        env_name=env_name,
        fail_fast=_resolve_fail_fast(environ=environ, env_name=env_name),
        postgres_dsn=environ.get(_CREDENTIALS_PG_DSN_KEY, "").strip(),
        accounts_table=environ.get(
            _CREDENTIALS_ACCOUNTS_TABLE_KEY,
            "credential_accounts",
        ).strip(),
        dev_api_keys=_resolve_dev_api_keys(environ=environ),
        totp_valid_window=_resolve_int(
            environ=environ,
            key=_TOTP_VALID_WINDOW_KEY,
            default=1,
            minimum=0,
        ),
        totp_period_seconds=_resolve_int(
            environ=environ,
            key=_TOTP_PERIOD_SECONDS_KEY,
            default=30,
            minimum=1,
        ),
        totp_default_label=environ.get(_TOTP_DEFAULT_LABEL_KEY, DEFAULT_TOTP_LABEL).strip(),
    )


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    raw_env_name = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env_name not in _ALLOWED_ENVS:
        raise ValueError(f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env_name!r}")
    return raw_env_name


def _resolve_fail_fast(*, environ: Mapping[str, str], env_name: str) -> bool:
    """
    Resolve fail-fast flag: explicit override wins, otherwise enabled only in `prod`.

    Args:
        environ: Runtime environment mapping.
        env_name: Normalized environment name.
    Returns:
        bool: Effective fail-fast flag.
    Assumptions:
        None.
    Raises:
        ValueError: If override is not a boolean literal.
    Side Effects:
        None.
    """
    raw_override = environ.get(_CREDENTIALS_FAIL_FAST_KEY, "").strip()
    if not raw_override:
        return env_name == "prod"
    return _parse_bool(raw_value=raw_override, key=_CREDENTIALS_FAIL_FAST_KEY)


def _resolve_int(*, environ: Mapping[str, str], key: str, default: int, minimum: int) -> int:
    raw_value = environ.get(key, "").strip()
    if not raw_value:
        return default
    try:
        parsed = int(raw_value)
    except ValueError as error:
        raise ValueError(f"{key} must be integer, got {raw_value!r}") from error
    if parsed < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_bool(*, raw_value: str, key: str) -> bool:
    normalized = raw_value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(
        f"{key} must be a boolean literal (1/0/true/false/yes/no/on/off), got {raw_value!r}"
    )


def _resolve_dev_api_keys(*, environ: Mapping[str, str]) -> tuple[str, ...]:
    """
    Parse comma-separated API keys provisioned into the in-memory store at startup.

    Args:
        environ: Runtime environment mapping.
    Returns:
        tuple[str, ...]: Unique non-blank keys in declaration order.
    Assumptions:
        Keys are ignored when a Postgres DSN selects the persistent store.
    Raises:
        None.
    Side Effects:
        None.
    """
    raw_keys = environ.get(_CREDENTIALS_DEV_API_KEYS_KEY, "")
    keys = (item.strip() for item in raw_keys.split(","))
    return tuple(dict.fromkeys(key for key in keys if key))
