from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from feastore.adapters.sqlalchemy.unit_of_work import is_started, startup
from feastore.app import (
    apply_documents,
    export_entities,
    export_features,
    export_groups,
    list_entities,
    list_features,
    list_groups,
    register_entity,
    register_feature,
    register_group,
    update_entity,
    update_feature,
    update_group,
)
from feastore.config import configure_logging, get_database_config
from feastore.domain.errors import DocumentError
from feastore.domain.model import FeatureValueType, GroupCategory, RecordKind
from feastore.ui.render import OutputFormat, render_documents, render_records

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from feastore.domain.apply import ApplyDocument

log = logging.getLogger(__name__)

KIND_CHOICES = ("entity", "group", "feature")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="feacli", description="Manage the feature catalog")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional YAML config file with the metadata store location",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Apply declarative catalog documents")
    apply.add_argument(
        "-f",
        "--filepath",
        type=str,
        required=True,
        help="YAML file to apply ('-' reads stdin)",
    )

    register = subparsers.add_parser("register", help="Register a single catalog record")
    register_sub = register.add_subparsers(dest="kind", required=True)

    register_entity_cmd = register_sub.add_parser("entity", help="Register an entity")
    register_entity_cmd.add_argument("name", type=str)
    register_entity_cmd.add_argument("-d", "--description", type=str, default="")

    register_group_cmd = register_sub.add_parser("group", help="Register a feature group")
    register_group_cmd.add_argument("name", type=str)
    register_group_cmd.add_argument(
        "-e", "--entity", type=str, required=True, help="Entity the group belongs to"
    )
    register_group_cmd.add_argument(
        "-c",
        "--category",
        type=GroupCategory,
        choices=list(GroupCategory),
        default=GroupCategory.BATCH,
        help="How the group is computed (default: %(default)s)",
    )
    register_group_cmd.add_argument("-d", "--description", type=str, default="")
    register_group_cmd.add_argument(
        "--snapshot-interval",
        type=_parse_seconds,
        help="Snapshot interval in seconds (stream groups)",
    )

    register_feature_cmd = register_sub.add_parser("feature", help="Register a feature")
    register_feature_cmd.add_argument("name", type=str)
    register_feature_cmd.add_argument(
        "-g", "--group", type=str, required=True, help="Group the feature belongs to"
    )
    register_feature_cmd.add_argument(
        "-t",
        "--value-type",
        type=FeatureValueType,
        choices=list(FeatureValueType),
        default=FeatureValueType.STRING,
        help="Value type of the feature (default: %(default)s)",
    )
    register_feature_cmd.add_argument("-d", "--description", type=str, default="")

    update = subparsers.add_parser("update", help="Update the description of a record")
    update.add_argument("kind", choices=KIND_CHOICES)
    update.add_argument("name", type=str)
    update.add_argument("-d", "--description", type=str, required=True)

    get = subparsers.add_parser("get", help="List catalog records")
    get.add_argument("kind", choices=KIND_CHOICES)
    get.add_argument(
        "-n",
        "--name",
        dest="names",
        action="append",
        help="Only show records with this name (repeatable)",
    )
    get.add_argument(
        "-o",
        "--output",
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.TABLE,
        help="Output format (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _parse_seconds(value: str) -> timedelta:
    seconds = int(value)
    if seconds < 0:
        raise ValueError(f"Snapshot interval must be non-negative: {value}")
    return timedelta(seconds=seconds)


def _run_apply(args: argparse.Namespace) -> None:
    if args.filepath == "-":
        result = apply_documents(sys.stdin)
    else:
        with Path(args.filepath).open("r", encoding="utf-8") as fh:
            result = apply_documents(fh)
    log.info(
        "Apply finished: created=%s, updated=%s, unchanged=%s, skipped=%s",
        result.created,
        result.updated,
        result.unchanged,
        result.skipped,
    )


def _run_register(args: argparse.Namespace) -> None:
    match RecordKind(args.kind.capitalize()):
        case RecordKind.ENTITY:
            register_entity(args.name, args.description)
        case RecordKind.GROUP:
            register_group(
                args.name,
                args.entity,
                category=args.category,
                description=args.description,
                snapshot_interval=args.snapshot_interval,
            )
        case RecordKind.FEATURE:
            register_feature(
                args.name,
                args.group,
                value_type=args.value_type,
                description=args.description,
            )


def _run_update(args: argparse.Namespace) -> None:
    match RecordKind(args.kind.capitalize()):
        case RecordKind.ENTITY:
            update_entity(args.name, args.description)
        case RecordKind.GROUP:
            update_group(args.name, args.description)
        case RecordKind.FEATURE:
            update_feature(args.name, args.description)
    log.info("Updated %s '%s'", args.kind, args.name)


def _run_get(args: argparse.Namespace) -> None:
    kind = RecordKind(args.kind.capitalize())
    if args.output is OutputFormat.YAML:
        documents: Sequence[ApplyDocument]
        match kind:
            case RecordKind.ENTITY:
                documents = export_entities(args.names)
            case RecordKind.GROUP:
                documents = export_groups(args.names)
            case RecordKind.FEATURE:
                documents = export_features(args.names)
        render_documents(documents, sys.stdout)
        return

    match kind:
        case RecordKind.ENTITY:
            listed = list_entities(args.names)
        case RecordKind.GROUP:
            listed = list_groups(args.names)
        case RecordKind.FEATURE:
            listed = list_features(args.names)
    render_records(listed, args.output, sys.stdout)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)

    # argparse exits with status 2 on invalid arguments
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if not is_started():
            startup(database_uri=get_database_config(config_file=parsed_args.config).uri)

        match parsed_args.command:
            case "apply":
                _run_apply(parsed_args)
            case "register":
                _run_register(parsed_args)
            case "update":
                _run_update(parsed_args)
            case "get":
                _run_get(parsed_args)
            case _:
                raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except DocumentError as exc:
        log.error("Invalid documents: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Command '%s' failed", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
