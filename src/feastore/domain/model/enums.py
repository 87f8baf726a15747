"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Discriminator for the three catalog record kinds."""

    ENTITY = "Entity"
    GROUP = "Group"
    FEATURE = "Feature"


class GroupCategory(StrEnum):
    BATCH = "batch"
    STREAM = "stream"


class FeatureValueType(StrEnum):
    STRING = "string"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"
    TIME = "time"
    BYTES = "bytes"
