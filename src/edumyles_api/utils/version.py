"""Version utility module for the EduMyles API."""

import re
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version

from loguru import logger
from pydantic import BaseModel

DISTRIBUTION_NAME = "edumyles-api"
DEV_VERSION = "0.1.0-dev"


class VersionInfo(BaseModel):
    """Version information model."""

    full_version: str
    version: str
    post_count: str | None = None
    git_commit: str | None = None
    is_dirty: bool = False


@lru_cache
def get_version() -> VersionInfo:
    """Return version information of the installed distribution.

    Falls back to a development version when the package is not installed
    (e.g. running from a source checkout).
    """
    try:
        full_version = version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        logger.warning(f"Distribution {DISTRIBUTION_NAME} not installed, using default version")
        full_version = DEV_VERSION

    base_version, post_count, git_commit, is_dirty = parse_version(full_version)
    return VersionInfo(
        version=base_version,
        full_version=full_version,
        post_count=post_count,
        git_commit=git_commit,
        is_dirty=is_dirty,
    )


def parse_version(full_version: str) -> tuple[str, str | None, str | None, bool]:
    """Parse a version string into its components.

    Args:
        full_version: e.g. ``0.1.0.post11+ga524f7b.dirty``

    Returns:
        tuple of base version, post count, git commit and dirty flag
    """
    base_version_match = re.match(r"^(\d+\.\d+\.\d+)", full_version)
    base_version = base_version_match.group(1) if base_version_match else full_version

    post_match = re.search(r"\.post(\d+)", full_version)
    git_match = re.search(r"\+g([a-f0-9]+)", full_version)

    return (
        base_version,
        post_match.group(1) if post_match else None,
        git_match.group(1) if git_match else None,
        ".dirty" in full_version,
    )
