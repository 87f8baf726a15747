from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import insert, inspect, select, text
from sqlalchemy.exc import IntegrityError

from feastore.adapters.sqlalchemy import create_all_tables, start_mappers
from feastore.adapters.sqlalchemy.mappings import entity_table, feature_table
from feastore.domain.model import Entity, Group, GroupCategory

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_start_mappers_is_idempotent() -> None:
    # First invocation happens in the sqlite_engine fixture; calling again should be harmless.
    start_mappers()
    start_mappers()


def test_create_all_tables_registers_catalog_tables(sqlite_engine: Engine) -> None:
    create_all_tables(sqlite_engine)

    tables = set(inspect(sqlite_engine).get_table_names())
    assert {"entity", "feature_group", "feature"} <= tables


def test_names_are_unique_per_table(sqlite_engine: Engine) -> None:
    now = datetime.now(UTC)
    row = {"name": "user", "description": "", "created_at": now, "updated_at": now}

    with sqlite_engine.connect() as connection:
        connection.execute(insert(entity_table).values(**row))
        with pytest.raises(IntegrityError):
            connection.execute(insert(entity_table).values(**row))


def test_foreign_keys_are_enforced(sqlite_engine: Engine) -> None:
    now = datetime.now(UTC)

    with sqlite_engine.connect() as connection, pytest.raises(IntegrityError):
        connection.execute(
            insert(feature_table).values(
                name="orphan",
                group_id=999,
                value_type="STRING",
                description="",
                created_at=now,
                updated_at=now,
            )
        )


def test_group_round_trip_normalises_types(sqlite_session: Session) -> None:
    local = timezone(timedelta(hours=2))
    stamp = datetime(2025, 1, 1, 12, 0, tzinfo=local)
    entity = Entity(name="user", created_at=stamp, updated_at=stamp)
    sqlite_session.add(entity)
    sqlite_session.flush()
    group = Group(
        name="clicks",
        entity_id=entity.persisted_id,
        category=GroupCategory.STREAM,
        snapshot_interval=timedelta(minutes=10),
        created_at=stamp,
        updated_at=stamp,
    )
    sqlite_session.add(group)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.execute(select(Group)).scalar_one()
    assert loaded.category is GroupCategory.STREAM
    assert loaded.snapshot_interval == timedelta(minutes=10)
    assert loaded.created_at == datetime(2025, 1, 1, 10, 0, tzinfo=UTC)

    raw = sqlite_session.execute(text("SELECT snapshot_interval FROM feature_group")).scalar_one()
    assert raw == 600
