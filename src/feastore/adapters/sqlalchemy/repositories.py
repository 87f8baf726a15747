"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError

from feastore.adapters.sqlalchemy.mappings import TABLE_BY_KIND
from feastore.domain.errors import RecordAlreadyExistsError, RecordNotFoundError
from feastore.domain.model import CatalogRecord, Entity, Feature, Group

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyCatalogRepository[TRecord: CatalogRecord]:
    """Shared persistence for the catalog record kinds; all calls share the session."""

    def __init__(self, session: Session, record_cls: type[TRecord]) -> None:
        self.session = session
        self._record_cls = record_cls
        self._kind = record_cls.KIND
        self._table = TABLE_BY_KIND[self._kind]

    def add(self, record: TRecord) -> TRecord:
        now = _utcnow()
        record.created_at = now
        record.updated_at = now
        try:
            # savepoint keeps the enclosing transaction usable after a conflict
            with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError as exc:
            if self._name_taken(record.name):
                raise RecordAlreadyExistsError(self._kind, record.name) from exc
            raise
        log.debug("Inserted %s '%s' with id %s", self._kind, record.name, record.id)
        return record

    def get(self, record_id: int) -> TRecord | None:
        return self.session.get(self._record_cls, record_id)

    def get_by_name(self, name: str) -> TRecord | None:
        stmt = select(self._record_cls).where(self._table.c.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def update_description(self, record_id: int, description: str) -> TRecord:
        record = self.get(record_id)
        if record is None:
            raise RecordNotFoundError(self._kind, record_id)
        record.description = description
        record.updated_at = _utcnow()
        self.session.flush()
        return record

    def list_records(self, names: Sequence[str] | None = None) -> list[TRecord]:
        stmt = select(self._record_cls).order_by(self._table.c.id)
        if names is not None:
            if not names:
                return []
            stmt = stmt.where(self._table.c.name.in_(list(names)))
        return list(self.session.execute(stmt).scalars())

    def _name_taken(self, name: str) -> bool:
        stmt = select(exists().where(self._table.c.name == name))
        return bool(self.session.execute(stmt).scalar())


class SqlAlchemyEntityRepository(SqlAlchemyCatalogRepository[Entity]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Entity)


class SqlAlchemyGroupRepository(SqlAlchemyCatalogRepository[Group]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Group)

    def list_for_entities(self, entity_ids: Iterable[int]) -> list[Group]:
        ids = list(entity_ids)
        if not ids:
            return []
        stmt = select(Group).where(self._table.c.entity_id.in_(ids)).order_by(self._table.c.id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyFeatureRepository(SqlAlchemyCatalogRepository[Feature]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Feature)

    def list_for_groups(self, group_ids: Iterable[int]) -> list[Feature]:
        ids = list(group_ids)
        if not ids:
            return []
        stmt = select(Feature).where(self._table.c.group_id.in_(ids)).order_by(self._table.c.id)
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from feastore.domain.ports.persistence import (
        EntityRepository,
        FeatureRepository,
        GroupRepository,
    )

    _session_stub = cast("Session", object())
    _entity_repo: EntityRepository = SqlAlchemyEntityRepository(_session_stub)
    _group_repo: GroupRepository = SqlAlchemyGroupRepository(_session_stub)
    _feature_repo: FeatureRepository = SqlAlchemyFeatureRepository(_session_stub)
