# stationdb/cli/main.py

import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from stationdb.core.config import load_config
from stationdb.core.database import StationDatabase
from stationdb.core.errors import StationDBError
from stationdb.core.log import configure_logging
from stationdb.core.records import station_countries, station_quality


HELP = """stationdb - local station database

Usage:
  stationdb status
  stationdb count
  stationdb breakdown
  stationdb lookup <station-id>
  stationdb search <term> [--page N]
  stationdb countries
  stationdb tui

Export:
  stationdb export-csv [path]
  stationdb export-json [path]

Maintenance:
  stationdb rebuild
  stationdb logo <station-id>
"""

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


# ------------------------------------------------------------
# Entry
# ------------------------------------------------------------

def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)

    config = load_config()
    configure_logging(level=config.log_level)

    if argv and argv[0] in ("-h", "--help", "help"):
        console.print(HELP)
        return 0

    cmd, *args = argv or ["status"]

    if cmd == "tui":
        from stationdb.tui.app import main as tui_main
        tui_main(config)
        return 0

    db = StationDatabase(config)
    try:
        return dispatch_command(db, cmd, args)
    except StationDBError as e:
        fail(str(e))
        return 1


def fail(msg: str) -> None:
    err_console.print(f"[bold red]Error:[/] {escape(msg)}")


def usage(line: str) -> int:
    err_console.print(f"Usage: stationdb {line}")
    return 1


# ------------------------------------------------------------
# Command dispatch
# ------------------------------------------------------------

def dispatch_command(db: StationDatabase, cmd: str, args: list) -> int:

    if cmd == "status":
        return status_cmd(db)

    if cmd == "count":
        console.print(db.count())
        return 0

    if cmd == "breakdown":
        console.print(str(db.breakdown()))
        return 0

    if cmd == "lookup":
        return lookup_cmd(db, args)

    if cmd == "search":
        return search_cmd(db, args)

    if cmd == "countries":
        countries = db.countries()
        console.print(", ".join(countries) if countries else "No countries found.")
        return 0

    if cmd in ("export-csv", "export-json"):
        return export_cmd(db, cmd.split("-", 1)[1], args)

    if cmd == "rebuild":
        return rebuild_cmd(db)

    if cmd == "logo":
        return logo_cmd(db, args)

    fail(f"Unknown command: {cmd}")
    return 1


# ------------------------------------------------------------
# Commands
# ------------------------------------------------------------

def status_cmd(db: StationDatabase) -> int:
    st = db.status()

    console.print("[bold blue]Station Database[/]")
    if st["base"]:
        console.print(f"[green]✓[/] Base stations: {st['base']}")
    else:
        console.print("[yellow]![/] Base stations: 0 (not found)")
    if st["user"]:
        console.print(f"[green]✓[/] User stations: {st['user']}")
    else:
        console.print("[yellow]![/] User stations: 0 (none added)")
    console.print(f"[cyan]Total available: {st['total']}[/]")
    console.print(f"Combined cache: {st['combined']}")

    if not st["available"]:
        fail(
            f"No station database available "
            f"(looked for {db.config.base_path} and {db.config.user_path})"
        )
        return 1
    return 0


def lookup_cmd(db: StationDatabase, args: list) -> int:
    if not args or not args[0].strip():
        return usage("lookup <station-id>")

    detail = db.detail(args[0].strip())
    console.print("\n[bold green]Station Found:[/]")
    console.print(detail, markup=False)
    return 0


def search_cmd(db: StationDatabase, args: list) -> int:
    page = 1
    if "--page" in args:
        i = args.index("--page")
        try:
            page = int(args[i + 1])
        except (IndexError, ValueError):
            return usage("search <term> [--page N]")
        args = args[:i] + args[i + 2 :]

    if not args:
        return usage("search <term> [--page N]")

    term = " ".join(args)
    results = db.search(term, page=page)
    if not results:
        console.print("No results.")
        return 0

    per_page = db.config.results_per_page
    for i, st in enumerate(results, (page - 1) * per_page + 1):
        console.print(
            f"[{i:2}] {st.get('name') or 'Unknown'}\n"
            f"     {st.get('callSign') or '-'} | "
            f"{station_quality(st)} | "
            f"{station_countries(st, sep=',', empty='UNK')}\n"
            f"     id: {st.get('stationId') or '-'}\n",
            markup=False,
        )
    return 0


def export_cmd(db: StationDatabase, fmt: str, args: list) -> int:
    path = Path(args[0]) if args else None
    console.print(f"[cyan]Exporting stations to {fmt.upper()}...[/]")
    result = db.export(fmt, path)
    console.print(
        f"[green]Successfully exported {result.count} stations to: {escape(str(result.path))}[/]"
    )
    return 0


def rebuild_cmd(db: StationDatabase) -> int:
    console.print("[bold blue]=== Rebuilding Combined Database ===[/]")
    path = db.rebuild()
    console.print(f"[green]Database ready: {db.breakdown().total} total stations[/]")
    console.print(f"Combined database: {escape(str(path))}")
    return 0


def logo_cmd(db: StationDatabase, args: list) -> int:
    if not args:
        return usage("logo <station-id>")

    path = db.logo(args[0])
    if path is None:
        console.print("[no logo available]", markup=False)
        return 0
    console.print(json.dumps({"stationId": args[0], "logo": str(path)}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
