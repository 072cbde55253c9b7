"""
Typed configuration package for latexfix.

This package exposes:
- ``Settings``: environment-driven service configuration (pydantic-settings).
- ``get_settings``: cached accessor used by the CLI and the HTTP app.
"""

from .settings import LogLevelChoice, Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "LogLevelChoice",
]
