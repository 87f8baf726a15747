"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import IO, TYPE_CHECKING

from feastore.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from feastore.domain.apply import (
    EntityDocument,
    FeatureDocument,
    GroupDocument,
    parse_stage,
    reconcile_stage,
)
from feastore.domain.errors import RecordNotFoundError
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
    from collections.abc import Sequence
    from datetime import timedelta

    from feastore.domain.apply import ApplyResult, CatalogUnitOfWorkFactory
    from feastore.domain.ports.persistence import CatalogRecordRepository
    from feastore.domain.ports.unit_of_work import CatalogRepositories


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListedRecord[TRecord: CatalogRecord]:
    """A stored record with the name of the record it belongs to (if any)."""

    record: TRecord
    parent_name: str | None = None


def _unit_of_work_factory(
    unit_of_work_factory: CatalogUnitOfWorkFactory | None,
) -> CatalogUnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


# apply ----------------------------------------------------------------------------------------


def apply_documents(
    stream: str | IO[str],
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> ApplyResult:
    """Parse a YAML document stream and reconcile it against the catalog.

    Parsing completes before the unit of work is opened, so a malformed or
    unknown-kind document aborts without touching the store.
    """

    stage = parse_stage(stream)
    log.info(
        "Staged %d entities, %d groups, %d features",
        len(stage.entities),
        len(stage.groups),
        len(stage.features),
    )
    return reconcile_stage(stage, unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory))


# register -------------------------------------------------------------------------------------


def register_entity(
    name: str,
    description: str = "",
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Entity:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        entity = uow.repositories.entities.add(Entity(name=name, description=description))
        uow.commit()
    log.info("Registered entity '%s' (id=%s)", entity.name, entity.id)
    return entity


def register_group(  # noqa: PLR0913
    name: str,
    entity_name: str,
    category: GroupCategory = GroupCategory.BATCH,
    description: str = "",
    snapshot_interval: timedelta | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Group:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        entity = _require(repositories.entities, RecordKind.ENTITY, entity_name)
        group = repositories.groups.add(
            Group(
                name=name,
                description=description,
                entity_id=entity.persisted_id,
                category=GroupCategory(category),
                snapshot_interval=snapshot_interval,
            )
        )
        uow.commit()
    log.info("Registered group '%s' for entity '%s' (id=%s)", group.name, entity_name, group.id)
    return group


def register_feature(
    name: str,
    group_name: str,
    value_type: FeatureValueType = FeatureValueType.STRING,
    description: str = "",
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Feature:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        group = _require(repositories.groups, RecordKind.GROUP, group_name)
        feature = repositories.features.add(
            Feature(
                name=name,
                description=description,
                group_id=group.persisted_id,
                value_type=FeatureValueType(value_type),
            )
        )
        uow.commit()
    log.info("Registered feature '%s' for group '%s' (id=%s)", feature.name, group_name, feature.id)
    return feature


# update ---------------------------------------------------------------------------------------


def update_entity(
    name: str,
    description: str,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Entity:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repository = uow.repositories.entities
        entity = _require(repository, RecordKind.ENTITY, name)
        updated = repository.update_description(entity.persisted_id, description)
        uow.commit()
    return updated


def update_group(
    name: str,
    description: str,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Group:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repository = uow.repositories.groups
        group = _require(repository, RecordKind.GROUP, name)
        updated = repository.update_description(group.persisted_id, description)
        uow.commit()
    return updated


def update_feature(
    name: str,
    description: str,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> Feature:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repository = uow.repositories.features
        feature = _require(repository, RecordKind.FEATURE, name)
        updated = repository.update_description(feature.persisted_id, description)
        uow.commit()
    return updated


# list -----------------------------------------------------------------------------------------


def list_entities(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[ListedRecord[Entity]]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        entities = uow.repositories.entities.list_records(names)
    return [ListedRecord(entity) for entity in entities]


def list_groups(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[ListedRecord[Group]]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        groups = repositories.groups.list_records(names)
        entity_names = _names_by_id(repositories.entities, {group.entity_id for group in groups})
    return [ListedRecord(group, entity_names.get(group.entity_id)) for group in groups]


def list_features(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[ListedRecord[Feature]]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        features = repositories.features.list_records(names)
        group_names = _names_by_id(repositories.groups, {feature.group_id for feature in features})
    return [ListedRecord(feature, group_names.get(feature.group_id)) for feature in features]


# export ---------------------------------------------------------------------------------------


def export_entities(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[EntityDocument]:
    """Return entities as apply documents with their groups and features nested."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        entities = repositories.entities.list_records(names)
        groups = repositories.groups.list_for_entities(entity.persisted_id for entity in entities)
        group_documents = _group_documents(repositories, groups, tagged=False)

    groups_by_entity: dict[int, list[GroupDocument]] = {}
    for group, document in zip(groups, group_documents, strict=True):
        groups_by_entity.setdefault(group.entity_id, []).append(document)

    return [
        EntityDocument(
            kind=RecordKind.ENTITY.value,
            name=entity.name,
            description=entity.description,
            groups=groups_by_entity.get(entity.persisted_id),
        )
        for entity in entities
    ]


def export_groups(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[GroupDocument]:
    """Return groups as apply documents naming their entity, with features nested."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        groups = repositories.groups.list_records(names)
        return _group_documents(repositories, groups, tagged=True)


def export_features(
    names: Sequence[str] | None = None,
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[FeatureDocument]:
    """Return features as apply documents naming their group."""

    listed = list_features(names, unit_of_work_factory=unit_of_work_factory)
    return [
        _feature_document(item.record, group_name=item.parent_name, tagged=True) for item in listed
    ]


# helpers --------------------------------------------------------------------------------------


def _require[TRecord: CatalogRecord](
    repository: CatalogRecordRepository[TRecord],
    kind: RecordKind,
    name: str,
) -> TRecord:
    record = repository.get_by_name(name)
    if record is None:
        raise RecordNotFoundError(kind, name)
    return record


def _names_by_id[TRecord: CatalogRecord](
    repository: CatalogRecordRepository[TRecord],
    ids: set[int],
) -> dict[int, str]:
    names: dict[int, str] = {}
    for record_id in sorted(ids):
        record = repository.get(record_id)
        if record is not None:
            names[record_id] = record.name
    return names


def _group_documents(
    repositories: CatalogRepositories,
    groups: Sequence[Group],
    *,
    tagged: bool,
) -> list[GroupDocument]:
    features = repositories.features.list_for_groups(group.persisted_id for group in groups)
    features_by_group: dict[int, list[FeatureDocument]] = {}
    for feature in features:
        features_by_group.setdefault(feature.group_id, []).append(
            _feature_document(feature, group_name=None, tagged=False)
        )

    entity_names = (
        _names_by_id(repositories.entities, {group.entity_id for group in groups}) if tagged else {}
    )
    return [
        GroupDocument(
            kind=RecordKind.GROUP.value if tagged else None,
            name=group.name,
            entity_name=entity_names.get(group.entity_id),
            category=group.category,
            snapshot_interval=group.snapshot_interval,
            description=group.description,
            features=features_by_group.get(group.persisted_id),
        )
        for group in groups
    ]


def _feature_document(feature: Feature, *, group_name: str | None, tagged: bool) -> FeatureDocument:
    return FeatureDocument(
        kind=RecordKind.FEATURE.value if tagged else None,
        name=feature.name,
        group_name=group_name,
        value_type=feature.value_type,
        description=feature.description,
    )
