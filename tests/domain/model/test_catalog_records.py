from __future__ import annotations

import pytest

from feastore.domain.model import (
    Entity,
    Feature,
    FeatureValueType,
    Group,
    GroupCategory,
    RecordKind,
)


def test_records_report_their_kind() -> None:
    assert Entity(name="user").kind is RecordKind.ENTITY
    assert Group(name="device", entity_id=1).kind is RecordKind.GROUP
    assert Feature(name="model", group_id=1).kind is RecordKind.FEATURE


def test_record_defaults() -> None:
    group = Group(name="device", entity_id=1)
    feature = Feature(name="model", group_id=1)

    assert group.description == ""
    assert group.category is GroupCategory.BATCH
    assert group.snapshot_interval is None
    assert feature.value_type is FeatureValueType.STRING
    assert feature.created_at is None


def test_persisted_id_requires_a_stored_record() -> None:
    entity = Entity(name="user")

    with pytest.raises(ValueError, match="has not been persisted"):
        _ = entity.persisted_id

    entity.id = 7
    assert entity.persisted_id == 7


def test_records_compare_by_identity() -> None:
    assert Entity(name="user") != Entity(name="user")
