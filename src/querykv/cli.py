"""CLI entrypoint for querykv."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from querykv.config.loader import (
    DEFAULT_CONFIG_PATH,
    get_default_projection,
    get_log_level,
    get_sqlite_path,
    load_config,
)
from querykv.database.record_repo import SqlRecordRepository
from querykv.errors import QueryKVError
from querykv.query.interface import all_keys, any_entry_ok
from querykv.query.predicates import attribute_equals, ever_true
from querykv.query.records import Record
from querykv.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

_MISSING = object()


class _ValueLoader(yaml.SafeLoader):
    """SafeLoader without the timestamp resolver, so dates stay text."""


_ValueLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _parse_assignment(text: str) -> Tuple[str, Any]:
    """
    Parse name=value. The value is read as YAML, so 3, true, null and
    {a: 1} become a number, boolean, null and mapping; anything else,
    including date-like values, is text.
    """
    name, sep, raw_value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected name=value, got {text!r}")
    if raw_value == "":
        return name, ""
    try:
        value = yaml.load(raw_value, Loader=_ValueLoader)
    except yaml.YAMLError:
        value = raw_value
    return name, value


def _load_cli_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the config once per invocation and keep it on args."""
    cached = getattr(args, "loaded_config", None)
    if cached is not None:
        return cached
    config_path = getattr(args, "config", None)
    if config_path is None and not DEFAULT_CONFIG_PATH.exists():
        config: Dict[str, Any] = {}
    else:
        config = load_config(config_path)
    args.loaded_config = config
    return config


def _open_repository(args: argparse.Namespace) -> SqlRecordRepository:
    config = _load_cli_config(args)
    sqlite_path = getattr(args, "db", None) or get_sqlite_path(config)
    return SqlRecordRepository(sqlite_path, projection=get_default_projection(config))


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, default=str))


def _record_payload(record: Record) -> Dict[str, Any]:
    return {"key": record.key, "attributes": record.attributes}


def cmd_put(args: argparse.Namespace) -> int:
    """Insert or replace a record."""
    repo = _open_repository(args)
    attributes = dict(args.assignments or [])
    repo.put(args.key, attributes)
    logger.info(f"Stored {args.key} ({len(attributes)} attributes)")
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    """Print one record as JSON."""
    repo = _open_repository(args)
    record = repo.query_for_object(args.key)
    if record is None:
        print(f"Not found: {args.key}", file=sys.stderr)
        return 1
    _print_json(_record_payload(record))
    return 0


def cmd_exists(args: argparse.Namespace) -> int:
    repo = _open_repository(args)
    found = repo.exists(args.key)
    print("true" if found else "false")
    return 0 if found else 1


def cmd_delete(args: argparse.Namespace) -> int:
    repo = _open_repository(args)
    if not repo.delete(args.key):
        print(f"Not found: {args.key}", file=sys.stderr)
        return 1
    return 0


def cmd_keys(args: argparse.Namespace) -> int:
    """List keys of records whose attributes equal every --where pair."""
    repo = _open_repository(args)
    conditions: List[Tuple[str, Any]] = list(args.where or [])
    if conditions:
        predicate = lambda record: all(
            record.get(name, _MISSING) == value for name, value in conditions
        )
    else:
        predicate = ever_true()
    for key in repo.query_for_keys(predicate):
        print(key)
    return 0


def cmd_entries(args: argparse.Namespace) -> int:
    """
    Print raw entries as JSON lines. With --match, a record is printed when
    any one of its attributes matches any --match pair.
    """
    repo = _open_repository(args)
    matchers = [attribute_equals(name, value) for name, value in (args.match or [])]
    if matchers:
        predicate = lambda field: any(matcher(field) for matcher in matchers)
    else:
        predicate = any_entry_ok
    keys = args.keys or all_keys()
    for key, attributes in repo.query_for_entry_stream(keys, predicate, args.attr or []):
        _print_json({"key": key, "attributes": attributes})
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=str,
        help="SQLite database path (overrides storage.sqlite_path in config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH} if present)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="querykv",
        description="Query schema-less key/attribute records",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level (default: logging.level from config, else INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # put command
    put_parser = subparsers.add_parser("put", help="Insert or replace a record")
    put_parser.add_argument("key", help="Record key")
    put_parser.add_argument(
        "assignments",
        nargs="*",
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help="Attribute assignments (values parsed as YAML scalars/mappings)",
    )
    _add_common_options(put_parser)
    put_parser.set_defaults(func=cmd_put)

    # get command
    get_parser = subparsers.add_parser("get", help="Print a record as JSON")
    get_parser.add_argument("key", help="Record key")
    _add_common_options(get_parser)
    get_parser.set_defaults(func=cmd_get)

    # exists command
    exists_parser = subparsers.add_parser("exists", help="Check whether a record exists")
    exists_parser.add_argument("key", help="Record key")
    _add_common_options(exists_parser)
    exists_parser.set_defaults(func=cmd_exists)

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a record")
    delete_parser.add_argument("key", help="Record key")
    _add_common_options(delete_parser)
    delete_parser.set_defaults(func=cmd_delete)

    # keys command
    keys_parser = subparsers.add_parser("keys", help="List record keys")
    keys_parser.add_argument(
        "--where",
        action="append",
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help=(
            "Only records whose attribute equals the value (repeatable, all must hold). "
            "Records are built with the configured query.projection, so conditions on "
            "attributes outside that projection never match"
        ),
    )
    _add_common_options(keys_parser)
    keys_parser.set_defaults(func=cmd_keys)

    # entries command
    entries_parser = subparsers.add_parser("entries", help="Stream raw record entries")
    entries_parser.add_argument("keys", nargs="*", help="Record keys (default: all)")
    entries_parser.add_argument(
        "--match",
        action="append",
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help="Keep records where any attribute equals a given pair (repeatable)",
    )
    entries_parser.add_argument(
        "--attr",
        action="append",
        metavar="NAME",
        help="Attribute to project (repeatable; default: all)",
    )
    _add_common_options(entries_parser)
    entries_parser.set_defaults(func=cmd_entries)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        level = args.log_level or get_log_level(_load_cli_config(args))
        configure_logging(level)
        exit_code = args.func(args)
    except QueryKVError as e:
        logger.error(f"Error running command '{args.command}': {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
