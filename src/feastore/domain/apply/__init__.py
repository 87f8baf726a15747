"""Declarative apply engine.

Flow:
1) parse a YAML document stream into typed documents (``documents``)
2) flatten nested documents into a name-linked stage (``stage``)
3) reconcile the stage against the catalog in one transaction (``reconcile``)
"""

from __future__ import annotations

from .documents import (
    ApplyDocument,
    EntityDocument,
    FeatureDocument,
    GroupDocument,
    dump_documents,
    load_documents,
    parse_document,
)
from .reconcile import (
    ApplyResult,
    CatalogReconciler,
    CatalogUnitOfWorkFactory,
    Outcome,
    reconcile_stage,
)
from .stage import (
    Stage,
    StagedEntity,
    StagedFeature,
    StagedGroup,
    build_stage,
    parse_stage,
    stage_document,
)

__all__ = [
    "ApplyDocument",
    "ApplyResult",
    "CatalogReconciler",
    "CatalogUnitOfWorkFactory",
    "EntityDocument",
    "FeatureDocument",
    "GroupDocument",
    "Outcome",
    "Stage",
    "StagedEntity",
    "StagedFeature",
    "StagedGroup",
    "build_stage",
    "dump_documents",
    "load_documents",
    "parse_document",
    "parse_stage",
    "reconcile_stage",
    "stage_document",
]
