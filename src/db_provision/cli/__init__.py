"""CLI module for reconciling a declared schema against a live database.

Provides commands for creating the missing database, tables, and
secondary indexes, for dropping the whole database behind a confirmation
prompt, and for managing connection profiles.

Usage:
    DB_PROFILE=local db-provision connect
    db-provision up --schema-file schema.toml
    db-provision up --url rethinkdb://localhost:28015
    db-provision drop
    db-provision status
    db-provision profiles

Commands:
    up        - Create whatever is missing from the declared schema
    drop      - Drop the declared database (asks for confirmation)
    connect   - Check a profile is reachable and remember it
    status    - Show current connection status
    profiles  - List available profiles
"""

import argparse
import asyncio
import logging
import sys
import tomllib
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from db_provision import __version__
from db_provision.adapters.base import SchemaBackend
from db_provision.config.loader import load_db_config, load_desired_state
from db_provision.errors import ConfirmationExhausted, ProvisionError
from db_provision.factory import (
    ProfileNotFoundError,
    check_connection,
    get_active_profile_name,
    get_backend,
    read_profile_lock,
    write_profile_lock,
)
from db_provision.schema.drop import DropGate
from db_provision.schema.models import Action, DesiredState, StatusLine
from db_provision.schema.reconciler import ReconciliationEngine

console = Console()

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _error_text(error: Exception) -> str:
    # KeyError wraps its message in quotes
    if isinstance(error, KeyError) and error.args:
        return str(error.args[0])
    return str(error)


def _print_error(error: Exception) -> None:
    console.print(f"[bold red]x[/bold red] {escape(_error_text(error))}")


def _resolve_schema_file(args: argparse.Namespace) -> Path:
    """Schema file from ``--schema-file``, else db.toml ``[schema] file``."""
    if getattr(args, "schema_file", None):
        return Path(args.schema_file)
    try:
        return Path(load_db_config().schema_file)
    except FileNotFoundError:
        return Path("schema.toml")


def _load_desired(args: argparse.Namespace) -> DesiredState | None:
    try:
        schema_path = _resolve_schema_file(args)
        logger.debug("Loading desired state from %s", schema_path)
        return load_desired_state(schema_path)
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return None


async def _open_backend(args: argparse.Namespace) -> SchemaBackend | None:
    try:
        return await get_backend(
            profile_name=getattr(args, "profile", None),
            env_prefix=getattr(args, "env_prefix", ""),
            database_url=getattr(args, "url", None),
        )
    except (
        ProfileNotFoundError,
        KeyError,
        FileNotFoundError,
        ValueError,
        tomllib.TOMLDecodeError,
    ) as e:
        _print_error(e)
        return None


def _print_status_line(line: StatusLine) -> None:
    style = "green" if line.action is Action.CREATE else "dim"
    console.print(line.format(), style=style, markup=False, highlight=False)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_up(args: argparse.Namespace) -> int:
    """Async implementation for up command.

    Status lines are printed as each object is reconciled.  The summary
    is printed only when the whole run succeeded.

    Returns:
        0 on success, 1 on any fatal error.
    """
    desired = _load_desired(args)
    if desired is None:
        return 1

    backend = await _open_backend(args)
    if backend is None:
        return 1

    try:
        engine = ReconciliationEngine(backend, on_status=_print_status_line)
        report = await engine.reconcile(desired)
    except ProvisionError as e:
        _print_error(e)
        return e.exit_code
    finally:
        await backend.close()

    console.print(report.format_summary(), markup=False, highlight=False)
    return 0


async def _async_drop(args: argparse.Namespace) -> int:
    """Async implementation for drop command.

    Returns:
        0 if dropped or declined, 1 on any fatal error.
    """
    desired = _load_desired(args)
    if desired is None:
        return 1

    backend = await _open_backend(args)
    if backend is None:
        return 1

    def ask(prompt: str) -> str:
        return console.input(escape(prompt))

    try:
        report = await DropGate(backend).run(desired.database_name, ask=ask)
    except ConfirmationExhausted as e:
        console.print(str(e), markup=False, highlight=False)
        return e.exit_code
    except ProvisionError as e:
        _print_error(e)
        return e.exit_code
    except EOFError:
        console.print("[bold red]x[/bold red] no answer read from input")
        return 1
    finally:
        await backend.close()

    console.print(report.format_summary(), markup=False, highlight=False)
    return 0


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Lists the databases of the chosen profile and, if that works,
    remembers the profile in the lock file.

    Returns:
        0 on success, 1 on failure.
    """
    previous_profile = read_profile_lock()
    env_prefix = getattr(args, "env_prefix", "")

    try:
        profile = args.profile or get_active_profile_name(env_prefix=env_prefix)
    except ProfileNotFoundError as e:
        _print_error(e)
        return 1

    args.profile = profile
    backend = await _open_backend(args)
    if backend is None:
        return 1

    console.print("Connecting to database...", style="dim")
    try:
        databases = await check_connection(backend)
    except ProvisionError as e:
        _print_error(e)
        return e.exit_code
    finally:
        await backend.close()

    write_profile_lock(profile)
    console.print()
    console.print(
        f"[bold green]v[/bold green] Connected to profile: "
        f"[bold cyan]{profile}[/bold cyan]"
    )
    console.print(f"  Databases: [dim]{escape(', '.join(sorted(databases)) or '-')}[/dim]")

    if previous_profile and previous_profile != profile:
        console.print(
            f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
            f"[dim]to[/dim] [bold cyan]{profile}[/bold cyan]"
        )
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_up(args: argparse.Namespace) -> int:
    """Create whatever is missing from the declared schema."""
    return asyncio.run(_async_up(args))


def cmd_drop(args: argparse.Namespace) -> int:
    """Drop the declared database after confirmation."""
    return asyncio.run(_async_drop(args))


def cmd_connect(args: argparse.Namespace) -> int:
    """Check a profile is reachable and remember it."""
    return asyncio.run(_async_connect(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile (connected)")

        try:
            config = load_db_config()
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
            table.add_row("Schema file", config.schema_file)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print(
            "[dim]Run:[/dim] [cyan]DB_PROFILE=<name> db-provision connect[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


# ============================================================================
# Main entry point
# ============================================================================


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--schema-file",
        help="Path to the desired-state TOML file (default: db.toml [schema] file)",
    )
    parser.add_argument("--profile", help="Profile from db.toml to use")
    parser.add_argument("--url", help="Connection URL (overrides profiles)")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="db-provision",
        description="Create missing databases, tables, and secondary indexes",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s version: {__version__}",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every query to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # up command
    p_up = subparsers.add_parser(
        "up",
        help="Create whatever is missing from the declared schema",
    )
    _add_target_arguments(p_up)
    p_up.set_defaults(func=cmd_up)

    # drop command
    p_drop = subparsers.add_parser(
        "drop",
        help="Drop the declared database (CAREFUL: asks for confirmation)",
    )
    _add_target_arguments(p_drop)
    p_drop.set_defaults(func=cmd_drop)

    # connect command
    p_connect = subparsers.add_parser(
        "connect",
        help="Check a profile is reachable and remember it",
    )
    p_connect.add_argument("--profile", help="Profile from db.toml to connect to")
    p_connect.set_defaults(func=cmd_connect)

    # status command
    p_status = subparsers.add_parser("status", help="Show current connection status")
    p_status.set_defaults(func=cmd_status)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
