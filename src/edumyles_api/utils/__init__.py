"""Utility functions for the EduMyles API."""

from edumyles_api.utils.version import VersionInfo, get_version

__all__ = [
    "VersionInfo",
    "get_version",
]
