"""SQLAlchemy mapping metadata for the catalog records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from feastore.domain.model import (
    CatalogRecord,
    Entity,
    Feature,
    FeatureValueType,
    Group,
    GroupCategory,
    RecordKind,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class IntervalSeconds(TypeDecorator[timedelta]):
    """Store a duration as whole seconds."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value: timedelta | None, dialect: Dialect) -> int | None:
        _ = dialect
        if value is None:
            return None
        return int(value.total_seconds())

    def process_result_value(self, value: int | None, dialect: Dialect) -> timedelta | None:
        _ = dialect
        if value is None:
            return None
        return timedelta(seconds=value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

entity_table = Table(
    "entity",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(64), nullable=False),
    Column("description", String, nullable=False, default=""),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("name"),
)

group_table = Table(
    "feature_group",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(64), nullable=False),
    Column("entity_id", Integer, ForeignKey("entity.id"), nullable=False),
    Column("category", Enum(GroupCategory, native_enum=False), nullable=False),
    Column("snapshot_interval", IntervalSeconds(), nullable=True),
    Column("description", String, nullable=False, default=""),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("name"),
)

feature_table = Table(
    "feature",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(64), nullable=False),
    Column("group_id", Integer, ForeignKey("feature_group.id"), nullable=False),
    Column("value_type", Enum(FeatureValueType, native_enum=False), nullable=False),
    Column("description", String, nullable=False, default=""),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("name"),
)

TABLE_BY_KIND: Final[dict[RecordKind, Table]] = {
    RecordKind.ENTITY: entity_table,
    RecordKind.GROUP: group_table,
    RecordKind.FEATURE: feature_table,
}

CLASS_BY_KIND: Final[dict[RecordKind, type[CatalogRecord]]] = {
    RecordKind.ENTITY: Entity,
    RecordKind.GROUP: Group,
    RecordKind.FEATURE: Feature,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the catalog records."""

    log.info("Starting SQLAlchemy mappers")

    for kind, record_cls in CLASS_BY_KIND.items():
        mapper_registry.map_imperatively(record_cls, TABLE_BY_KIND[kind])

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
