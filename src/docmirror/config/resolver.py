"""
Configuration resolution and environment variable substitution.

Supports ``${VAR_NAME}`` and ``${VAR_NAME:-default}``. An unset variable with
no default resolves to an empty string so validation can report it as missing.
"""

import os
import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def resolve_config(config_data: dict[str, Any]) -> dict[str, Any]:
    """
    Resolve environment placeholders throughout a configuration mapping.

    Args:
        config_data: Configuration dictionary

    Returns:
        Resolved configuration (a new dictionary)
    """
    return _resolve_value(config_data)


def _resolve_value(value: Any) -> Any:
    """Recursively resolve values in configuration."""
    if isinstance(value, dict):
        return {k: _resolve_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_value(item) for item in value]
    elif isinstance(value, str):
        return _PLACEHOLDER.sub(_substitute, value)
    else:
        return value


def _substitute(match: re.Match) -> str:
    name, default = match.group(1), match.group(2)
    value = os.getenv(name)
    if value:
        return value
    return default if default is not None else ""
