"""YAML configuration file loading.

The file is optional. Only the metadata store location is read from it::

    metadata:
      uri: postgresql+psycopg://feastore@localhost/feastore

or, for the default SQLite backend::

    metadata:
      sqlite:
        path: ~/feastore/catalog.db
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import ConfigurationError, MissingConfigurationError


@dataclass(frozen=True, slots=True)
class FileConfig:
    metadata_uri: str | None = None
    sqlite_path: Path | None = None


def load_config_file(path: str | Path) -> FileConfig:
    """Load and validate the YAML config file at ``path``."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise MissingConfigurationError(
            f"Configuration file '{config_path}' does not exist.", source=config_path
        )

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in config file '{config_path}': {exc}", source=config_path
        ) from exc

    if data is None:
        raise ConfigurationError(
            f"Configuration file '{config_path}' is empty.", source=config_path
        )
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file '{config_path}' must contain a mapping at the root.",
            source=config_path,
        )

    metadata = _section(cast(dict[str, Any], data), "metadata", config_path)
    uri = metadata.get("uri")
    if uri is not None and not isinstance(uri, str):
        raise ConfigurationError(
            f"'metadata.uri' in '{config_path}' must be a string.", source=config_path
        )

    sqlite = _section(metadata, "sqlite", config_path)
    sqlite_path = sqlite.get("path")
    if sqlite_path is not None and not isinstance(sqlite_path, str):
        raise ConfigurationError(
            f"'metadata.sqlite.path' in '{config_path}' must be a string.", source=config_path
        )

    return FileConfig(
        metadata_uri=uri or None,
        sqlite_path=Path(sqlite_path).expanduser() if sqlite_path else None,
    )


def _section(data: dict[str, Any], key: str, config_path: Path) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"'{key}' in '{config_path}' must be a mapping.", source=config_path
        )
    return cast(dict[str, Any], value)
