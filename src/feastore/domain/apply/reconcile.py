"""Reconcile a stage against the persisted catalog.

All reads and writes of one stage go through a single unit of work, so the
apply either lands completely or not at all. Records are processed entities
first, then groups, then features, each list in stage order:

- absent records are created (parents resolved by name inside the transaction);
- present records whose description differs get the description updated;
- identical records are left alone.

Groups and features whose parent cannot be resolved are skipped, not rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from feastore.domain.errors import RecordAlreadyExistsError, ReconciliationError
from feastore.domain.model import CatalogRecord, Entity, Feature, Group, RecordKind
from feastore.domain.ports.unit_of_work import CatalogUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterator

    from feastore.domain.apply.stage import Stage, StagedEntity, StagedFeature, StagedGroup
    from feastore.domain.ports.persistence import CatalogRecordRepository
    from feastore.domain.ports.unit_of_work import CatalogRepositories

log = logging.getLogger(__name__)

type CatalogUnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


class Outcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass(slots=True)
class ApplyResult:
    """Summary of the decisions taken for one stage."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0

    def record(self, outcome: Outcome) -> None:
        match outcome:
            case Outcome.CREATED:
                self.created += 1
            case Outcome.UPDATED:
                self.updated += 1
            case Outcome.UNCHANGED:
                self.unchanged += 1
            case Outcome.SKIPPED:
                self.skipped += 1

    @property
    def mutations(self) -> int:
        return self.created + self.updated


@dataclass(slots=True)
class CatalogReconciler:
    """Apply stages to the catalog, one transaction per stage."""

    unit_of_work_factory: CatalogUnitOfWorkFactory

    def reconcile(self, stage: Stage) -> ApplyResult:
        result = ApplyResult()
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            for entity in stage.entities:
                with _applying(RecordKind.ENTITY, entity.name):
                    result.record(self._apply_entity(repositories, entity))
            for group in stage.groups:
                with _applying(RecordKind.GROUP, group.name):
                    result.record(self._apply_group(repositories, group))
            for feature in stage.features:
                with _applying(RecordKind.FEATURE, feature.name):
                    result.record(self._apply_feature(repositories, feature))
            uow.commit()

        log.info(
            "Applied stage: created=%d, updated=%d, unchanged=%d, skipped=%d",
            result.created,
            result.updated,
            result.unchanged,
            result.skipped,
        )
        return result

    def _apply_entity(self, repositories: CatalogRepositories, staged: StagedEntity) -> Outcome:
        def build() -> Entity:
            return Entity(name=staged.name, description=staged.description)

        return _upsert(repositories.entities, staged.name, staged.description, build)

    def _apply_group(self, repositories: CatalogRepositories, staged: StagedGroup) -> Outcome:
        entity_name = staged.entity_name
        if entity_name is None:
            log.info("Skipping group '%s': no entity reference", staged.name)
            return Outcome.SKIPPED

        def build() -> Group | None:
            entity = repositories.entities.get_by_name(entity_name)
            if entity is None:
                log.info("Skipping group '%s': entity '%s' not found", staged.name, entity_name)
                return None
            return Group(
                name=staged.name,
                description=staged.description,
                entity_id=entity.persisted_id,
                category=staged.category,
                snapshot_interval=staged.snapshot_interval,
            )

        return _upsert(repositories.groups, staged.name, staged.description, build)

    def _apply_feature(self, repositories: CatalogRepositories, staged: StagedFeature) -> Outcome:
        group_name = staged.group_name
        if group_name is None:
            log.info("Skipping feature '%s': no group reference", staged.name)
            return Outcome.SKIPPED

        def build() -> Feature | None:
            group = repositories.groups.get_by_name(group_name)
            if group is None:
                log.info("Skipping feature '%s': group '%s' not found", staged.name, group_name)
                return None
            return Feature(
                name=staged.name,
                description=staged.description,
                group_id=group.persisted_id,
                value_type=staged.value_type,
            )

        return _upsert(repositories.features, staged.name, staged.description, build)


def reconcile_stage(stage: Stage, *, unit_of_work_factory: CatalogUnitOfWorkFactory) -> ApplyResult:
    """Apply ``stage`` inside one unit of work produced by ``unit_of_work_factory``."""

    return CatalogReconciler(unit_of_work_factory).reconcile(stage)


def _upsert[TRecord: CatalogRecord](
    repository: CatalogRecordRepository[TRecord],
    name: str,
    description: str,
    build: Callable[[], TRecord | None],
) -> Outcome:
    existing = repository.get_by_name(name)
    if existing is None:
        record = build()
        if record is None:
            return Outcome.SKIPPED
        try:
            repository.add(record)
        except RecordAlreadyExistsError:
            # inserted concurrently between lookup and create
            existing = repository.get_by_name(name)
            if existing is None:
                raise
            log.debug("%s '%s' appeared concurrently; comparing instead", existing.kind, name)
        else:
            log.debug("Created %s '%s'", record.kind, name)
            return Outcome.CREATED

    if existing.description == description:
        log.debug("%s '%s' unchanged", existing.kind, name)
        return Outcome.UNCHANGED

    repository.update_description(existing.persisted_id, description)
    log.debug("Updated description of %s '%s'", existing.kind, name)
    return Outcome.UPDATED


@contextmanager
def _applying(kind: RecordKind, name: str) -> Iterator[None]:
    try:
        yield
    except ReconciliationError:
        raise
    except Exception as exc:
        log.error("Failed to apply %s '%s'; rolling back", kind, name)  # noqa: TRY400
        raise ReconciliationError(kind, name, exc) from exc
