"""CLI commands for Lexistore."""

from . import (
    build,
    query,
    export,
    config_cmd,
)

__all__ = [
    "build",
    "query",
    "export",
    "config_cmd",
]
