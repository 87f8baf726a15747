"""Reusable builders and fakes for catalog tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from textwrap import dedent
from typing import TYPE_CHECKING, Literal

from feastore.domain.model import CatalogRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from types import TracebackType

    from feastore.domain.ports.persistence import CatalogRecordRepository
    from feastore.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork


USER_ENTITY_YAML = dedent(
    """\
    kind: Entity
    name: user
    description: A platform user
    groups:
      - name: device
        category: batch
        description: Device information
        features:
          - name: model
            value-type: string
            description: Device model
          - name: price
            value-type: int64
            description: Device price
      - name: account
        category: batch
        description: Account information
    """
)


def yaml_stream(*documents: str) -> str:
    """Join YAML documents into one ``---`` separated stream."""

    return "---\n".join(dedent(document) for document in documents)


@dataclass
class DelegatingRepository[TRecord: CatalogRecord]:
    """Forward to ``inner`` while letting tests inject failures."""

    inner: CatalogRecordRepository[TRecord]
    before_add: Callable[[], None] | None = None
    hide_names_once: set[str] = field(default_factory=set[str])

    def add(self, record: TRecord) -> TRecord:
        if self.before_add is not None:
            self.before_add()
        return self.inner.add(record)

    def get(self, record_id: int) -> TRecord | None:
        return self.inner.get(record_id)

    def get_by_name(self, name: str) -> TRecord | None:
        if name in self.hide_names_once:
            # pretend the row is not there yet, as if a concurrent writer won the race
            self.hide_names_once.discard(name)
            return None
        return self.inner.get_by_name(name)

    def update_description(self, record_id: int, description: str) -> TRecord:
        return self.inner.update_description(record_id, description)

    def list_records(self, names: Sequence[str] | None = None) -> list[TRecord]:
        return self.inner.list_records(names)

    def __getattr__(self, name: str) -> object:
        return getattr(self.inner, name)


class PatchedUnitOfWork:
    """Unit of work whose repositories are rewritten by ``patch`` on entry."""

    def __init__(
        self,
        inner: CatalogUnitOfWork,
        patch: Callable[[CatalogRepositories], CatalogRepositories],
    ) -> None:
        self._inner = inner
        self._patch = patch
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> PatchedUnitOfWork:
        self._inner.__enter__()
        self._repositories = self._patch(self._inner.repositories)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self._inner.__exit__(exc_type, exc_value, traceback)
        self._repositories = None
        return False

    @property
    def repositories(self) -> CatalogRepositories:
        assert self._repositories is not None
        return self._repositories

    def commit(self) -> None:
        self._inner.commit()

    def rollback(self) -> None:
        self._inner.rollback()


def patched_factory(
    factory: Callable[[], CatalogUnitOfWork],
    patch: Callable[[CatalogRepositories], CatalogRepositories],
) -> Callable[[], PatchedUnitOfWork]:
    def build() -> PatchedUnitOfWork:
        return PatchedUnitOfWork(factory(), patch)

    return build


def failing_after(adds: int) -> Callable[[CatalogRepositories], CatalogRepositories]:
    """Patch every repository to raise on the ``adds``-th insert across all kinds."""

    counter = {"adds": 0}

    def before_add() -> None:
        counter["adds"] += 1
        if counter["adds"] >= adds:
            raise RuntimeError(f"injected store failure on add #{counter['adds']}")

    def patch(repositories: CatalogRepositories) -> CatalogRepositories:
        return replace(
            repositories,
            entities=DelegatingRepository(repositories.entities, before_add),
            groups=DelegatingRepository(repositories.groups, before_add),
            features=DelegatingRepository(repositories.features, before_add),
        )  # type: ignore[arg-type]

    return patch


def hiding_entities(names: Iterable[str]) -> Callable[[CatalogRepositories], CatalogRepositories]:
    """Patch the entity repository so each name's first lookup misses."""

    hidden = set(names)

    def patch(repositories: CatalogRepositories) -> CatalogRepositories:
        entities = DelegatingRepository(repositories.entities, hide_names_once=set(hidden))
        return replace(repositories, entities=entities)  # type: ignore[arg-type]

    return patch
