"""Output formats for ``feacli get``."""

from __future__ import annotations

import csv
from enum import StrEnum
from typing import IO, TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from feastore.domain.apply import dump_documents
from feastore.domain.model import Entity, Feature, Group, RecordKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from feastore.app import ListedRecord
    from feastore.domain.apply import ApplyDocument
    from feastore.domain.model import CatalogRecord


class OutputFormat(StrEnum):
    TABLE = "table"
    CSV = "csv"
    YAML = "yaml"


type Row = tuple[str, ...]

TITLES: dict[RecordKind, str] = {
    RecordKind.ENTITY: "Entities",
    RecordKind.GROUP: "Groups",
    RecordKind.FEATURE: "Features",
}


def render_records(
    listed: Sequence[ListedRecord[CatalogRecord]],
    output_format: OutputFormat,
    out: IO[str],
) -> None:
    """Write ``listed`` as a rich table or as CSV; nothing is written when it is empty."""

    if not listed:
        return
    headers, rows = tabulate(listed)
    match output_format:
        case OutputFormat.TABLE:
            table = Table(title=f"{TITLES[listed[0].record.kind]} ({len(rows)})")
            for header in headers:
                table.add_column(header, style="cyan" if header == "NAME" else None)
            for row in rows:
                table.add_row(*row)
            Console(file=out).print(table)
        case OutputFormat.CSV:
            writer = csv.writer(out, lineterminator="\n")
            writer.writerow(headers)
            writer.writerows(rows)
        case OutputFormat.YAML:
            raise ValueError("YAML output is rendered from documents, use render_documents")


def render_documents(documents: Sequence[ApplyDocument], out: IO[str]) -> None:
    if documents:
        out.write(dump_documents(documents))


def tabulate(listed: Sequence[ListedRecord[CatalogRecord]]) -> tuple[Row, list[Row]]:
    headers: Row = ()
    rows: list[Row] = []
    for item in listed:
        record = item.record
        parent = item.parent_name or ""
        match record:
            case Entity():
                headers = ("NAME", "DESCRIPTION", "CREATED", "UPDATED")
                rows.append((record.name, record.description, *_stamps(record)))
            case Group():
                headers = (
                    "NAME",
                    "ENTITY",
                    "CATEGORY",
                    "SNAPSHOT INTERVAL",
                    "DESCRIPTION",
                    "CREATED",
                    "UPDATED",
                )
                interval = record.snapshot_interval
                rows.append(
                    (
                        record.name,
                        parent,
                        str(record.category),
                        "" if interval is None else str(int(interval.total_seconds())),
                        record.description,
                        *_stamps(record),
                    )
                )
            case Feature():
                headers = ("NAME", "GROUP", "VALUE TYPE", "DESCRIPTION", "CREATED", "UPDATED")
                rows.append(
                    (
                        record.name,
                        parent,
                        str(record.value_type),
                        record.description,
                        *_stamps(record),
                    )
                )
            case _:
                raise TypeError(f"Unsupported record type: {type(record).__name__}")
    return headers, rows


def _stamps(record: CatalogRecord) -> tuple[str, str]:
    return _timestamp(record.created_at), _timestamp(record.updated_at)


def _timestamp(value: datetime | None) -> str:
    return "" if value is None else value.isoformat(timespec="seconds")
