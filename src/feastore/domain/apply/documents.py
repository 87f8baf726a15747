"""Declarative apply documents and the YAML stream parser.

A stream holds one or more YAML documents separated by ``---``. Each document is
either tagged with a ``kind`` (``Entity``, ``Group`` or ``Feature``) or is a
collection wrapped in ``items``/``Items`` whose kind is taken from the first
element. Entity documents may nest groups, and group documents may nest features.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timedelta  # noqa: TC003
from typing import IO, TYPE_CHECKING, Any, Literal, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from feastore.domain.errors import InvalidDocumentError, MissingKindError, UnknownKindError
from feastore.domain.model import FeatureValueType, GroupCategory, RecordKind

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)

COLLECTION_KEYS: tuple[str, ...] = ("items", "Items")


def _casefold(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


class ApplyDocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FeatureDocument(ApplyDocumentModel):
    kind: Literal["Feature"] | None = None
    name: str
    group_name: str | None = Field(default=None, alias="group-name")
    value_type: FeatureValueType = Field(alias="value-type")
    description: str = ""

    _normalize_value_type = field_validator("value_type", mode="before")(_casefold)
    _normalize_description = field_validator("description", mode="before")(_none_to_empty)


class GroupDocument(ApplyDocumentModel):
    kind: Literal["Group"] | None = None
    name: str
    entity_name: str | None = Field(default=None, alias="entity-name")
    category: GroupCategory
    snapshot_interval: timedelta | None = Field(default=None, alias="snapshot-interval")
    description: str = ""
    features: list[FeatureDocument] | None = None

    _normalize_category = field_validator("category", mode="before")(_casefold)
    _normalize_description = field_validator("description", mode="before")(_none_to_empty)

    @field_serializer("snapshot_interval")
    def _serialize_snapshot_interval(self, value: timedelta | None) -> int | None:
        return None if value is None else int(value.total_seconds())


class EntityDocument(ApplyDocumentModel):
    kind: Literal["Entity"] | None = None
    name: str
    description: str = ""
    groups: list[GroupDocument] | None = None

    _normalize_description = field_validator("description", mode="before")(_none_to_empty)


type ApplyDocument = EntityDocument | GroupDocument | FeatureDocument


def load_documents(stream: str | IO[str]) -> list[ApplyDocument]:
    """Parse every document in ``stream``.

    The whole stream is read before returning, so a malformed document anywhere
    aborts the load without yielding partial results.
    """

    documents: list[ApplyDocument] = []
    position = 0
    try:
        for raw in yaml.safe_load_all(stream):
            position += 1
            if raw is None:
                continue
            documents.extend(parse_document(raw, position=position))
    except yaml.YAMLError as exc:
        raise InvalidDocumentError(f"malformed YAML: {exc}", position + 1) from exc

    log.debug("Parsed %d apply documents from %d YAML documents", len(documents), position)
    return documents


def parse_document(raw: object, *, position: int = 1) -> list[ApplyDocument]:
    """Parse one decoded YAML document into zero or more typed documents."""

    if not isinstance(raw, Mapping):
        raise MissingKindError(position)
    mapping = cast(Mapping[str, Any], raw)

    kind_value = mapping.get("kind")
    if kind_value is not None:
        kind = _parse_kind(kind_value, position)
        return [_validate(kind, mapping, position)]

    items_key = _collection_key(mapping)
    if items_key is None:
        raise MissingKindError(position)

    items = mapping[items_key]
    if items is None:
        return []
    if not isinstance(items, list):
        raise InvalidDocumentError(f"'{items_key}' must be a list", position)
    elements = cast(list[object], items)
    if not elements:
        return []

    first = elements[0]
    first_kind = cast(Mapping[str, Any], first).get("kind") if isinstance(first, Mapping) else None
    if first_kind is None:
        raise MissingKindError(position)
    kind = _parse_kind(first_kind, position)
    return [_validate(kind, element, position) for element in elements]


def dump_documents(documents: Sequence[ApplyDocument]) -> str:
    """Render documents as YAML that ``load_documents`` accepts again.

    A single document is emitted as is; several are wrapped in ``items``.
    """

    payloads = [_to_payload(document) for document in documents]
    if not payloads:
        return ""
    body: object = payloads[0] if len(payloads) == 1 else {"items": payloads}
    return yaml.safe_dump(body, sort_keys=False, allow_unicode=True)


def document_kind(document: ApplyDocument) -> RecordKind:
    match document:
        case EntityDocument():
            return RecordKind.ENTITY
        case GroupDocument():
            return RecordKind.GROUP
        case FeatureDocument():
            return RecordKind.FEATURE


def _collection_key(mapping: Mapping[str, Any]) -> str | None:
    present = [key for key in COLLECTION_KEYS if key in mapping]
    if not present:
        return None
    for key in present:
        if isinstance(mapping[key], list):
            return key
    return present[0]


def _parse_kind(value: object, position: int) -> RecordKind:
    try:
        return RecordKind(value)
    except ValueError:
        raise UnknownKindError(value, position) from None


def _validate(kind: RecordKind, raw: object, position: int) -> ApplyDocument:
    model: type[EntityDocument | GroupDocument | FeatureDocument]
    match kind:
        case RecordKind.ENTITY:
            model = EntityDocument
        case RecordKind.GROUP:
            model = GroupDocument
        case RecordKind.FEATURE:
            model = FeatureDocument
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidDocumentError(f"{kind} {_describe_errors(exc)}", position) from exc


def _describe_errors(exc: ValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        details.append(f"{location}: {error['msg']}")
    return "; ".join(details)


def _to_payload(document: ApplyDocument) -> dict[str, Any]:
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)
