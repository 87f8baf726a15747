"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .file import load_config_file

if TYPE_CHECKING:
    from .file import FileConfig

APP_DIR_NAME: Final[str] = "feastore"
DEFAULT_DB_FILENAME: Final[str] = "feastore.db"

DATA_DIR_ENV: Final[str] = "FEASTORE_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "FEASTORE_DATABASE_URI"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def database_uri(self) -> str:
        return sqlite_uri(self.database_path())


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def sqlite_uri(path: Path) -> str:
    return f"sqlite+pysqlite:///{path}"


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_database_config(
    *,
    storage: StorageConfig | None = None,
    config_file: str | Path | None = None,
) -> DatabaseConfig:
    """Resolve the metadata database location.

    Precedence: ``FEASTORE_DATABASE_URI``, then ``metadata.uri`` and
    ``metadata.sqlite.path`` from ``config_file``, then the data directory default.
    """

    env_uri = os.getenv(DATABASE_URI_ENV)
    if env_uri:
        return DatabaseConfig(uri=env_uri)

    file_config: FileConfig | None = load_config_file(config_file) if config_file else None
    if file_config is not None:
        if file_config.metadata_uri:
            return DatabaseConfig(uri=file_config.metadata_uri)
        if file_config.sqlite_path is not None:
            sqlite_path = file_config.sqlite_path.resolve()
            sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            return DatabaseConfig(uri=sqlite_uri(sqlite_path))

    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())
