from __future__ import annotations

from datetime import timedelta

import pytest

from feastore.domain.apply.documents import EntityDocument, GroupDocument, parse_document
from feastore.domain.apply.stage import (
    Stage,
    StagedEntity,
    StagedFeature,
    StagedGroup,
    build_stage,
    parse_stage,
    stage_document,
)
from feastore.domain.errors import UnknownKindError
from feastore.domain.model import FeatureValueType, GroupCategory
from tests.helpers.catalog import USER_ENTITY_YAML, yaml_stream


def test_nested_entity_flattens_into_name_linked_stage() -> None:
    stage = parse_stage(USER_ENTITY_YAML)

    assert stage.entities == [StagedEntity(name="user", description="A platform user")]
    assert [group.name for group in stage.groups] == ["device", "account"]
    assert {group.entity_name for group in stage.groups} == {"user"}
    assert [feature.name for feature in stage.features] == ["model", "price"]
    assert {feature.group_name for feature in stage.features} == {"device"}
    assert len(stage) == 5


def test_single_feature_and_items_wrapped_feature_stage_identically() -> None:
    single = parse_stage(
        "kind: Feature\nname: model\ngroup-name: device\nvalue-type: string\n"
    )
    wrapped = parse_stage(
        "items:\n"
        "  - kind: Feature\n"
        "    name: model\n"
        "    group-name: device\n"
        "    value-type: string\n"
    )

    assert single == wrapped
    assert single.features == [
        StagedFeature(
            name="model",
            value_type=FeatureValueType.STRING,
            group_name="device",
        )
    ]


def test_standalone_group_keeps_explicit_entity_and_nested_features() -> None:
    document = GroupDocument.model_validate(
        {
            "kind": "Group",
            "name": "clicks",
            "entity-name": "user",
            "category": "stream",
            "snapshot-interval": 60,
            "features": [{"name": "count", "value-type": "int64"}],
        }
    )

    stage = stage_document(document)

    assert stage.entities == []
    assert stage.groups == [
        StagedGroup(
            name="clicks",
            category=GroupCategory.STREAM,
            entity_name="user",
            snapshot_interval=timedelta(seconds=60),
        )
    ]
    assert stage.features == [
        StagedFeature(name="count", value_type=FeatureValueType.INT64, group_name="clicks")
    ]


def test_nested_children_take_their_parent_name() -> None:
    document = EntityDocument.model_validate(
        {
            "kind": "Entity",
            "name": "user",
            "groups": [
                {
                    "name": "device",
                    "entity-name": "someone-else",
                    "category": "batch",
                    "features": [
                        {"name": "model", "group-name": "elsewhere", "value-type": "string"}
                    ],
                }
            ],
        }
    )

    stage = stage_document(document)

    assert stage.groups[0].entity_name == "user"
    assert stage.features[0].group_name == "device"


def test_standalone_records_without_parent_reference_are_staged_unlinked() -> None:
    stage = parse_stage(
        yaml_stream(
            "kind: Group\nname: device\ncategory: batch\n",
            "kind: Feature\nname: model\nvalue-type: string\n",
        )
    )

    assert stage.groups[0].entity_name is None
    assert stage.features[0].group_name is None


def test_build_stage_preserves_document_order_across_documents() -> None:
    documents = [
        *parse_document({"kind": "Entity", "name": "user"}),
        *parse_document({"items": [{"kind": "Entity", "name": "merchant"}]}),
    ]

    stage = build_stage(documents)

    assert [entity.name for entity in stage.entities] == ["user", "merchant"]


def test_stage_merge_appends_in_order() -> None:
    first = Stage(entities=[StagedEntity(name="user")])
    second = Stage(entities=[StagedEntity(name="merchant")])

    first.merge(second)

    assert [entity.name for entity in first.entities] == ["user", "merchant"]


def test_unknown_kind_aborts_staging() -> None:
    with pytest.raises(UnknownKindError):
        parse_stage(yaml_stream(USER_ENTITY_YAML, "kind: Bogus\nname: x\n"))
