"""Installed package version."""

from importlib import metadata

FALLBACK_VERSION = "1.0.0"


def get_version() -> str:
    try:
        return metadata.version("music-mcp")
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION
