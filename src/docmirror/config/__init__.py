"""
Configuration management.

YAML file parsing, environment resolution and typed sync settings.
"""

from docmirror.config.loader import Config, load_config
from docmirror.config.resolver import resolve_config
from docmirror.config.settings import SyncSettings

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "SyncSettings",
]
