"""CLI entry point.

Usage:
    python -m edumyles_api.cli db check
    python -m edumyles_api.cli db upgrade
    edumyles-api-cli events publish <tenant-id> <type> --data '{"studentId": "s-1"}'
    edumyles-api-cli events subscriptions <module-id>
"""

import sys

from loguru import logger

import edumyles_api
from edumyles_api.cli.app import app


def _configure_cli_logging() -> None:
    """Configure loguru for CLI (compact format: level + message, no timestamps)."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <level>{message}</level>",
        level="INFO",
        colorize=True,
    )
    logger.enable(edumyles_api.__name__)


def main() -> None:
    """CLI entry point with logging configuration."""
    _configure_cli_logging()
    app()


if __name__ == "__main__":
    main()
