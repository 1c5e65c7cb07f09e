"""
CLI entrypoint for running the Duokey FastAPI service.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="duokey-api")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Run API process using uvicorn.

    Args:
        argv: Optional command arguments without program name.
    Returns:
        int: Process exit code.
    Assumptions:
        `apps.api.main.app:create_app` is importable.
    Raises:
        ValueError: If runtime settings are invalid.
    Side Effects:
        Configures root logging and starts the HTTP server loop.
    """
    args = _build_parser().parse_args(argv)
    _configure_logging()
    uvicorn.run(
        "apps.api.main.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
