"""SQLAlchemy adapter package for feastore."""

from __future__ import annotations

from .mappings import (
    CLASS_BY_KIND,
    TABLE_BY_KIND,
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyFeatureRepository,
    SqlAlchemyGroupRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    create_catalog_engine,
    shutdown,
    startup,
)

__all__ = [
    "CLASS_BY_KIND",
    "TABLE_BY_KIND",
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyFeatureRepository",
    "SqlAlchemyGroupRepository",
    "StartupError",
    "create_all_tables",
    "create_catalog_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
