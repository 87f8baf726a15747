"""Public domain model surface."""

from __future__ import annotations

from feastore.domain.model.catalog import CatalogRecord, Entity, Feature, Group
from feastore.domain.model.enums import FeatureValueType, GroupCategory, RecordKind

__all__ = [
    "CatalogRecord",
    "Entity",
    "Feature",
    "FeatureValueType",
    "Group",
    "GroupCategory",
    "RecordKind",
]
