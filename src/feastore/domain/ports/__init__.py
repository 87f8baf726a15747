"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    CatalogRecordRepository,
    EntityRepository,
    FeatureRepository,
    GroupRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRecordRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "EntityRepository",
    "FeatureRepository",
    "GroupRepository",
    "RepositoryCollection",
    "UnitOfWork",
]
