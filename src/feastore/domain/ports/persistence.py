"""Ports for persisting catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from feastore.domain.model import CatalogRecord, Entity, Feature, Group

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@runtime_checkable
class CatalogRecordRepository[TRecord: CatalogRecord](Protocol):
    """Persistence contract shared by all catalog record kinds."""

    def add(self, record: TRecord) -> TRecord:
        """Persist ``record`` and assign its id.

        Raises ``RecordAlreadyExistsError`` when the name is already taken.
        """
        ...

    def get(self, record_id: int) -> TRecord | None: ...

    def get_by_name(self, name: str) -> TRecord | None: ...

    def update_description(self, record_id: int, description: str) -> TRecord:
        """Replace the description; raises ``RecordNotFoundError`` for unknown ids."""
        ...

    def list_records(self, names: Sequence[str] | None = None) -> list[TRecord]: ...


@runtime_checkable
class EntityRepository(CatalogRecordRepository[Entity], Protocol):
    """Repository contract for entities."""


@runtime_checkable
class GroupRepository(CatalogRecordRepository[Group], Protocol):
    """Repository contract for feature groups."""

    def list_for_entities(self, entity_ids: Iterable[int]) -> list[Group]: ...


@runtime_checkable
class FeatureRepository(CatalogRecordRepository[Feature], Protocol):
    """Repository contract for features."""

    def list_for_groups(self, group_ids: Iterable[int]) -> list[Feature]: ...
