"""Flatten parsed documents into a name-linked stage.

Nested children are pulled out of their hierarchy and stamped with the name of
their parent; parents are resolved to ids only later, during reconciliation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING

from feastore.domain.apply.documents import (
    EntityDocument,
    FeatureDocument,
    GroupDocument,
    load_documents,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta

    from feastore.domain.apply.documents import ApplyDocument
    from feastore.domain.model import FeatureValueType, GroupCategory

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StagedEntity:
    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class StagedGroup:
    name: str
    category: GroupCategory
    description: str = ""
    entity_name: str | None = None
    snapshot_interval: timedelta | None = None


@dataclass(frozen=True, slots=True)
class StagedFeature:
    name: str
    value_type: FeatureValueType
    description: str = ""
    group_name: str | None = None


@dataclass(slots=True)
class Stage:
    """Intended records of one apply, in document order."""

    entities: list[StagedEntity] = field(default_factory=list["StagedEntity"])
    groups: list[StagedGroup] = field(default_factory=list["StagedGroup"])
    features: list[StagedFeature] = field(default_factory=list["StagedFeature"])

    def merge(self, other: Stage) -> None:
        self.entities.extend(other.entities)
        self.groups.extend(other.groups)
        self.features.extend(other.features)

    def __len__(self) -> int:
        return len(self.entities) + len(self.groups) + len(self.features)


def parse_stage(stream: str | IO[str]) -> Stage:
    """Parse a YAML document stream and flatten it into one stage."""

    stage = build_stage(load_documents(stream))
    log.debug(
        "Staged %d entities, %d groups, %d features",
        len(stage.entities),
        len(stage.groups),
        len(stage.features),
    )
    return stage


def build_stage(documents: Iterable[ApplyDocument]) -> Stage:
    """Concatenate the stage fragments of ``documents``; no sorting or deduplication."""

    stage = Stage()
    for document in documents:
        stage.merge(stage_document(document))
    return stage


def stage_document(document: ApplyDocument) -> Stage:
    stage = Stage()
    match document:
        case EntityDocument():
            _stage_entity(stage, document)
        case GroupDocument():
            _stage_group(stage, document, entity_name=document.entity_name)
        case FeatureDocument():
            _stage_feature(stage, document, group_name=document.group_name)
    return stage


def _stage_entity(stage: Stage, document: EntityDocument) -> None:
    stage.entities.append(StagedEntity(name=document.name, description=document.description))
    for group in document.groups or ():
        _stage_group(stage, group, entity_name=document.name)


def _stage_group(stage: Stage, document: GroupDocument, *, entity_name: str | None) -> None:
    stage.groups.append(
        StagedGroup(
            name=document.name,
            category=document.category,
            description=document.description,
            entity_name=entity_name,
            snapshot_interval=document.snapshot_interval,
        )
    )
    for feature in document.features or ():
        _stage_feature(stage, feature, group_name=document.name)


def _stage_feature(stage: Stage, document: FeatureDocument, *, group_name: str | None) -> None:
    stage.features.append(
        StagedFeature(
            name=document.name,
            value_type=document.value_type,
            description=document.description,
            group_name=group_name,
        )
    )
