"""Error types raised by the catalog domain and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feastore.domain.model import RecordKind


class FeastoreError(RuntimeError):
    """Base class for catalog errors."""


class DocumentError(FeastoreError):
    """Raised when an apply document cannot be parsed."""


class MissingKindError(DocumentError):
    """Raised when a document has neither a ``kind`` tag nor an ``items`` list."""

    def __init__(self, position: int) -> None:
        super().__init__(f"invalid document #{position}: missing 'kind' or 'items'")
        self.position = position


class UnknownKindError(DocumentError):
    """Raised when a document declares a kind outside Entity/Group/Feature."""

    def __init__(self, kind: object, position: int) -> None:
        super().__init__(f"invalid document #{position}: invalid kind '{kind}'")
        self.kind = kind
        self.position = position


class InvalidDocumentError(DocumentError):
    """Raised when a document is not valid YAML or fails field validation."""

    def __init__(self, message: str, position: int | None = None) -> None:
        prefix = "invalid document" if position is None else f"invalid document #{position}"
        super().__init__(f"{prefix}: {message}")
        self.position = position


class RecordAlreadyExistsError(FeastoreError):
    """Raised when a record name collides with an existing record of the same kind."""

    def __init__(self, kind: RecordKind, name: str) -> None:
        super().__init__(f"{kind} '{name}' already exists")
        self.kind = kind
        self.name = name


class RecordNotFoundError(FeastoreError):
    """Raised when a record referenced by id or name does not exist."""

    def __init__(self, kind: RecordKind, key: int | str) -> None:
        super().__init__(f"{kind} not found by {'id' if isinstance(key, int) else 'name'} {key!r}")
        self.kind = kind
        self.key = key


class ReconciliationError(FeastoreError):
    """Raised when applying a stage fails; the transaction has been rolled back."""

    def __init__(self, kind: RecordKind, name: str, reason: BaseException) -> None:
        super().__init__(f"failed to apply {kind} '{name}': {reason}")
        self.kind = kind
        self.name = name
