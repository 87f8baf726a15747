from __future__ import annotations

from pathlib import Path

import pytest

from feastore.config import (
    ConfigurationError,
    MissingConfigurationError,
    StorageConfig,
    get_database_config,
    get_storage_config,
)


@pytest.fixture(autouse=True)
def clear_database_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FEASTORE_DATABASE_URI", raising=False)


def test_storage_config_uses_env_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("FEASTORE_DATA_DIR", str(tmp_path / "data"))

    storage = get_storage_config()

    assert storage.resolve_data_dir() == (tmp_path / "data").resolve()
    assert storage.database_path() == (tmp_path / "data" / "feastore.db").resolve()
    assert (tmp_path / "data").is_dir()


def test_storage_config_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("FEASTORE_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    monkeypatch.setattr("os.name", "posix")

    storage = get_storage_config()

    assert storage.data_dir == (tmp_path / "feastore").resolve()


def test_database_path_without_ensure_does_not_create_directory(tmp_path: Path) -> None:
    storage = StorageConfig(data_dir=tmp_path / "absent")

    assert storage.database_path(ensure=False) == (tmp_path / "absent" / "feastore.db").resolve()
    assert not (tmp_path / "absent").exists()


def test_database_uri_from_environment_wins(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    config = tmp_path / "feastore.yaml"
    config.write_text("metadata:\n  uri: sqlite+pysqlite:///from-file.db\n", encoding="utf-8")
    monkeypatch.setenv("FEASTORE_DATABASE_URI", "postgresql+psycopg://catalog")

    assert get_database_config(config_file=config).uri == "postgresql+psycopg://catalog"


def test_database_uri_from_config_file(tmp_path: Path) -> None:
    config = tmp_path / "feastore.yaml"
    config.write_text(
        "metadata:\n"
        "  uri: sqlite+pysqlite:///from-file.db\n"
        "  sqlite:\n"
        "    path: ignored.db\n",
        encoding="utf-8",
    )

    assert get_database_config(config_file=config).uri == "sqlite+pysqlite:///from-file.db"


def test_database_sqlite_path_from_config_file(tmp_path: Path) -> None:
    database = tmp_path / "nested" / "catalog.db"
    config = tmp_path / "feastore.yaml"
    config.write_text(f"metadata:\n  sqlite:\n    path: {database}\n", encoding="utf-8")

    uri = get_database_config(config_file=config).uri

    assert uri == f"sqlite+pysqlite:///{database.resolve()}"
    assert database.parent.is_dir()


def test_database_defaults_to_storage_file(tmp_path: Path) -> None:
    storage = StorageConfig(data_dir=tmp_path)

    uri = get_database_config(storage=storage).uri

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'feastore.db').resolve()}"


def test_config_file_without_metadata_falls_back_to_storage(tmp_path: Path) -> None:
    config = tmp_path / "feastore.yaml"
    config.write_text("other: value\n", encoding="utf-8")
    storage = StorageConfig(data_dir=tmp_path)

    uri = get_database_config(storage=storage, config_file=config).uri

    assert uri.endswith("feastore.db")


def test_missing_config_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(MissingConfigurationError):
        get_database_config(config_file=tmp_path / "absent.yaml")


def test_configuration_errors_are_runtime_errors() -> None:
    assert issubclass(MissingConfigurationError, ConfigurationError)
    assert issubclass(ConfigurationError, RuntimeError)
