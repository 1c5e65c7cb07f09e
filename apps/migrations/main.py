"""
Migration runner: `alembic upgrade head` under a Postgres advisory lock.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Mapping

import psycopg
from psycopg.conninfo import conninfo_to_dict
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.engine.url import make_url

from alembic import command
from alembic.config import Config

log = logging.getLogger(__name__)

_DSN_ENV_KEY = "CREDENTIALS_PG_DSN"
_DEFAULT_LOCK_KEY = 71402281
_URL_DRIVERS = frozenset({"postgresql", "postgres", "postgresql+psycopg"})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="duokey-migrations")
    parser.add_argument(
        "--dsn",
        default="",
        help=f"Postgres DSN. Falls back to ${_DSN_ENV_KEY} when omitted.",
    )
    parser.add_argument(
        "--lock-key",
        type=int,
        default=_DEFAULT_LOCK_KEY,
        help="Advisory lock key held while migrations run.",
    )
    return parser


def resolve_dsn(*, arg_dsn: str, environ: Mapping[str, str]) -> str:
    """
    Resolve Postgres DSN from CLI argument or environment.

    Args:
        arg_dsn: CLI `--dsn` value.
        environ: Environment mapping.
    Returns:
        str: Non-empty DSN.
    Assumptions:
        CLI value wins over `CREDENTIALS_PG_DSN`.
    Raises:
        ValueError: If DSN is missing.
    Side Effects:
        None.
    """
    dsn = arg_dsn.strip() or environ.get(_DSN_ENV_KEY, "").strip()
    if not dsn:
        raise ValueError(f"Migration DSN is required via --dsn or {_DSN_ENV_KEY}")
    return dsn


def to_sqlalchemy_url(*, dsn: str) -> URL:
    """
    Normalize URL or libpq conninfo DSN into a `postgresql+psycopg` SQLAlchemy URL.

    Args:
        dsn: Raw Postgres DSN.
    Returns:
        URL: SQLAlchemy URL for the psycopg dialect.
    Assumptions:
        Anything without a `scheme://` prefix is libpq conninfo.
    Raises:
        ValueError: If DSN is blank, uses another database driver, or is unparsable.
    Side Effects:
        None.
    """
    normalized = dsn.strip()
    if not normalized:
        raise ValueError("Postgres DSN cannot be empty")
    if "://" in normalized:
        parsed_url = make_url(normalized)
        if parsed_url.drivername not in _URL_DRIVERS:
            raise ValueError("Postgres URL DSN must use postgresql:// or postgres:// scheme")
        return parsed_url.set(drivername="postgresql+psycopg")

    try:
        fields = conninfo_to_dict(normalized)
    except psycopg.ProgrammingError as error:
        raise ValueError("Postgres DSN must be URL or libpq conninfo format") from error

    raw_port = str(fields.pop("port", "") or "").strip()
    try:
        port = int(raw_port) if raw_port else None
    except ValueError as error:
        raise ValueError("Conninfo port must be numeric when provided") from error
    host = str(fields.pop("host", "") or fields.pop("hostaddr", "") or "").strip() or None
    username = str(fields.pop("user", "") or "").strip() or None
    password = str(fields.pop("password", "") or "").strip() or None
    database = str(fields.pop("dbname", "") or "").strip() or None
    query = {key: str(value) for key, value in sorted(fields.items()) if str(value)}
    return URL.create(
        "postgresql+psycopg",
        username=username,
        password=password,
        host=host,
        port=port,
        database=database,
        query=query,
    )


def _build_alembic_config(*, repo_root: Path) -> Config:
    alembic_ini = repo_root / "alembic.ini"
    if not alembic_ini.exists():
        raise ValueError(f"Missing Alembic config file: {alembic_ini}")
    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(repo_root / "alembic"))
    return config


def _upgrade_head_under_lock(*, config: Config, sqlalchemy_url: URL, lock_key: int) -> None:
    """
    Run `alembic upgrade head` on a connection holding `pg_advisory_lock`.

    Args:
        config: Prepared Alembic config.
        sqlalchemy_url: Target database URL.
        lock_key: Advisory lock key.
    Returns:
        None.
    Assumptions:
        Alembic must reuse the locked connection, passed via `config.attributes`.
    Raises:
        Exception: Database or Alembic failures propagate.
    Side Effects:
        Applies schema migrations.
    """
    engine = create_engine(sqlalchemy_url, pool_pre_ping=True)
    with engine.connect() as connection:
        _advisory_lock(connection=connection, lock_key=lock_key, acquire=True)
        try:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
            connection.commit()
            log.info("migrations applied lock_key=%s", lock_key)
        except Exception:
            connection.rollback()
            raise
        finally:
            _advisory_lock(connection=connection, lock_key=lock_key, acquire=False)
            connection.commit()


def _advisory_lock(*, connection: Connection, lock_key: int, acquire: bool) -> None:
    function = "pg_advisory_lock" if acquire else "pg_advisory_unlock"
    log.info("%s lock_key=%s", function, lock_key)
    connection.execute(text(f"SELECT {function}(:lock_key)"), {"lock_key": lock_key})


def main(argv: list[str] | None = None) -> int:
    """
    Apply migrations and report failure through the exit code.

    Args:
        argv: Optional CLI argument list without program name.
    Returns:
        int: Zero on success, one on failure.
    Assumptions:
        Deployment treats a non-zero exit as a failed release step.
    Raises:
        None.
    Side Effects:
        Configures logging, connects to Postgres, and applies migrations.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    args = _build_parser().parse_args(argv)
    try:
        sqlalchemy_url = to_sqlalchemy_url(dsn=resolve_dsn(arg_dsn=args.dsn, environ=os.environ))
        config = _build_alembic_config(repo_root=Path(__file__).resolve().parents[2])
        _upgrade_head_under_lock(
            config=config,
            sqlalchemy_url=sqlalchemy_url,
            lock_key=args.lock_key,
        )
    except Exception:
        log.exception("migration failed")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
