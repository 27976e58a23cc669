"""Command-line interface for mapkeeper."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console
from rich.table import Table

from mapkeeper import (
    ClientMap,
    ClientNodeBasics,
    ConfigError,
    MapAccessDeniedError,
    MapDeleteStatus,
    MapKeeper,
    MapKeeperConfig,
    MapNotFoundError,
    PrivateClientMap,
    StorageError,
    TreeValidationError,
    config_from_env,
    load_config,
)


def _package_version() -> str:
    try:
        return version("mapkeeper")
    except PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mapkeeper")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to mapkeeper.json (defaults to MAPKEEPER_* environment variables)")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", parents=[common], help="Create the maps and nodes tables")

    create_parser = subparsers.add_parser("create", parents=[common], help="Create an empty map")
    create_parser.add_argument("--root-name", default=None, help="Text of the root node")

    show_parser = subparsers.add_parser("show", parents=[common], help="Show a map as clients see it")
    show_parser.add_argument("map_id")
    show_parser.add_argument("--json", action="store_true", help="Print the client JSON instead of a table")

    delete_parser = subparsers.add_parser("delete", parents=[common], help="Delete a map with its admin id")
    delete_parser.add_argument("map_id")
    delete_parser.add_argument("--admin-id", required=True)

    sweep_parser = subparsers.add_parser("sweep", parents=[common], help="Delete outdated maps once")
    sweep_parser.add_argument("--days", type=int, default=None, help="Override delete_after_days")

    sweeper_parser = subparsers.add_parser("sweeper", parents=[common], help="Delete outdated maps periodically")
    sweeper_parser.add_argument("--interval", type=float, default=None, help="Seconds between sweeps")

    return parser


def _load(args: argparse.Namespace) -> MapKeeperConfig:
    if args.config:
        return load_config(args.config)
    return config_from_env()


def _format_created(created: PrivateClientMap) -> Table:
    table = Table(title="Map created", show_header=False)
    table.add_row("Map ID", created.map.uuid)
    table.add_row("Admin ID", created.admin_id)
    table.add_row("Modification secret", created.modification_secret)
    table.add_row("Deleted at", created.map.deleted_at.isoformat(sep=" ", timespec="seconds"))
    return table


def _format_map(client_map: ClientMap) -> Table:
    table = Table(title=f"Map {client_map.uuid}")
    table.add_column("Node")
    table.add_column("Parent")
    table.add_column("Name")
    table.add_column("Flags")
    for node in client_map.data:
        flags = [flag for flag, enabled in (("root", node.is_root), ("detached", node.detached)) if enabled]
        table.add_row(node.id, node.parent or "-", node.name or "", ", ".join(flags))
    table.caption = (
        f"{len(client_map.data)} node(s) - deleted after {client_map.delete_after_days} day(s) of inactivity, "
        f"on {client_map.deleted_at.isoformat(sep=' ', timespec='seconds')}"
    )
    return table


async def _run_init_db(args: argparse.Namespace, console: Console) -> None:
    config = _load(args)
    async with MapKeeper.from_config(config) as keeper:
        await keeper.init_schema()
    console.print(f"Schema ready: {config.database_url}")


async def _run_create(args: argparse.Namespace, console: Console) -> PrivateClientMap:
    async with MapKeeper.from_config(_load(args)) as keeper:
        created = await keeper.create_map(ClientNodeBasics(name=args.root_name))
    console.print(_format_created(created))
    return created


async def _run_show(args: argparse.Namespace, console: Console) -> ClientMap:
    async with MapKeeper.from_config(_load(args)) as keeper:
        client_map = await keeper.get_map(args.map_id)
    if client_map is None:
        raise MapNotFoundError(args.map_id)
    if args.json:
        console.print_json(client_map.model_dump_json(by_alias=True))
    else:
        console.print(_format_map(client_map))
    return client_map


async def _run_delete(args: argparse.Namespace, console: Console) -> None:
    async with MapKeeper.from_config(_load(args)) as keeper:
        outcome = await keeper.delete_map(args.map_id, args.admin_id)
    if outcome.status is MapDeleteStatus.NOT_FOUND:
        raise MapNotFoundError(args.map_id)
    if outcome.status is MapDeleteStatus.FORBIDDEN:
        raise MapAccessDeniedError(args.map_id)
    console.print(f"Deleted map {args.map_id}")


async def _run_sweep(args: argparse.Namespace, console: Console) -> int:
    async with MapKeeper.from_config(_load(args)) as keeper:
        deleted = await keeper.sweep(args.days)
    console.print(f"Deleted {deleted} outdated map(s)")
    return deleted


async def _run_sweeper(args: argparse.Namespace, console: Console) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    config = _load(args)
    interval = args.interval if args.interval is not None else config.sweep_interval_seconds
    console.print(f"Sweeping every {interval:g}s, deleting maps inactive for {config.delete_after_days} day(s)")
    async with MapKeeper.from_config(config) as keeper:
        runs = await keeper.run_sweeper(stop=stop, interval_seconds=interval)
    console.print(f"Sweeper stopped after {runs} run(s)")
    return runs


_COMMANDS = {
    "init-db": _run_init_db,
    "create": _run_create,
    "show": _run_show,
    "delete": _run_delete,
    "sweep": _run_sweep,
    "sweeper": _run_sweeper,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    console = Console()
    try:
        asyncio.run(_COMMANDS[args.command](args, console))
        return 0
    except (MapNotFoundError, MapAccessDeniedError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except StorageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except TreeValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
