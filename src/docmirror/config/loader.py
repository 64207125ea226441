"""
Configuration file loading.

Loads ``config.yaml`` from the project directory when present, otherwise a
built-in default that reads everything from the environment.
"""

import copy
from pathlib import Path
from typing import Any

import yaml

from docmirror.config.resolver import resolve_config
from docmirror.exceptions import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "source": {
        "type": "google_drive",
        "root_folder_id": "${DRIVE_ROOT_FOLDER_ID}",
        "credentials_json": "${GOOGLE_SERVICE_ACCOUNT_JSON}",
    },
    "storage": {
        "type": "s3",
        "config": {
            "bucket": "${MIRROR_BUCKET}",
            "region": "${S3_REGION}",
            "endpoint_url": "${S3_ENDPOINT_URL}",
        },
    },
    "catalog": {
        "type": "duckdb",
        "path": "${CATALOG_PATH:-data/docmirror.duckdb}",
    },
    "sync": {
        "max_upload_bytes": "${MAX_UPLOAD_BYTES:-52428800}",
        "checksum_algorithm": "sha256",
        "enrichment": [],
        "progress_every": 10,
    },
    "logging": {
        "level": "${LOG_LEVEL:-INFO}",
    },
}


class Config:
    """DocMirror configuration container with dot-notation lookup."""

    def __init__(self, data: dict[str, Any]):
        self.data = data
        # Convenience properties for the top-level sections
        self.source = data.get("source") or {}
        self.storage = data.get("storage") or {}
        self.catalog = data.get("catalog") or {}
        self.sync = data.get("sync") or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def validate(self) -> None:
        """Validate the shape of the top-level sections."""
        errors = []
        for section in ("source", "storage", "catalog", "sync", "logging"):
            value = self.data.get(section)
            if value is not None and not isinstance(value, dict):
                errors.append(f"Configuration '{section}' must be a mapping, got {type(value).__name__}")
        if errors:
            raise ConfigurationError("\n".join(errors))


def load_config(project_path: Path | None = None) -> Config:
    """
    Load DocMirror configuration.

    ``config.yaml`` (if present) is merged over the built-in defaults, then
    environment placeholders are resolved.

    Args:
        project_path: Directory containing config.yaml (default: current directory)

    Returns:
        Config instance with merged configuration

    Raises:
        ConfigurationError: If config.yaml cannot be parsed
    """
    if project_path is None:
        project_path = Path.cwd()

    config_data = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(project_path) / "config.yaml"
    if config_path.is_file():
        try:
            with open(config_path) as f:
                file_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark is not None else ""
            raise ConfigurationError(
                f"Error parsing config.yaml{where}: {e}\n  File: {config_path}",
                details={"file": str(config_path)},
            ) from e
        if not isinstance(file_data, dict):
            raise ConfigurationError(
                f"config.yaml must contain a mapping, got {type(file_data).__name__}",
                details={"file": str(config_path)},
            )
        _merge_dict(config_data, file_data)

    config = Config(resolve_config(config_data))
    config.validate()
    return config


def _merge_dict(base: dict, override: dict):
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value
