"""Persisted catalog records.

Records are linked by integer ids once stored. Timestamps are owned by the store:
repositories stamp ``created_at``/``updated_at``; domain code never sets them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from feastore.domain.model.enums import FeatureValueType, GroupCategory, RecordKind

if TYPE_CHECKING:
    from datetime import datetime, timedelta


@dataclass(eq=False, kw_only=True)
class CatalogRecord:
    """Named record; ``name`` is unique within its kind."""

    # class-level discriminator; subclasses must override
    KIND: ClassVar[RecordKind]

    name: str
    description: str = ""

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def kind(self) -> RecordKind:
        return self.KIND

    @property
    def persisted_id(self) -> int:
        """Return the store-assigned id; only valid once the record has been added."""
        if self.id is None:
            raise ValueError(f"{self.KIND} '{self.name}' has not been persisted")
        return self.id


@dataclass(eq=False, kw_only=True)
class Entity(CatalogRecord):
    KIND: ClassVar[RecordKind] = RecordKind.ENTITY


@dataclass(eq=False, kw_only=True)
class Group(CatalogRecord):
    """Features computed together for one entity.

    ``snapshot_interval`` is only meaningful for stream groups.
    """

    KIND: ClassVar[RecordKind] = RecordKind.GROUP

    entity_id: int
    category: GroupCategory = GroupCategory.BATCH
    snapshot_interval: timedelta | None = None


@dataclass(eq=False, kw_only=True)
class Feature(CatalogRecord):
    KIND: ClassVar[RecordKind] = RecordKind.FEATURE

    group_id: int
    value_type: FeatureValueType = FeatureValueType.STRING
