"""CLI module for managing HubDB tables from local JSON documents.

Usage:
    HUBDB_ACCOUNT=prod hubdb-sync create events.hubdb.json
    hubdb-sync upload 123456 events.hubdb.json
    hubdb-sync fetch 123456 [dest.json]
    hubdb-sync clear 123456
    hubdb-sync publish 123456
    hubdb-sync delete 123456 --confirm
    hubdb-sync accounts
    hubdb-sync --use-env upload 123456 events.hubdb.json

Commands:
    create    - Create a table from a local document and publish it
    upload    - Update a table's schema and rows from a local document
    fetch     - Download a table and its rows to a local document
    clear     - Delete every row of a table
    publish   - Publish a table
    delete    - Delete a table
    accounts  - List configured accounts
"""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Awaitable, Callable

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from hubdb_sync.adapters.base import HubDbClient
from hubdb_sync.config.loader import get_environment_variable_config, load_hubdb_config
from hubdb_sync.config.models import AccountProfile, HubDbConfig
from hubdb_sync.errors import HubDbError
from hubdb_sync.factory import ProfileNotFoundError, get_active_account, get_client
from hubdb_sync.operations import (
    clear_table_rows,
    create_table,
    delete_table,
    download_table,
    publish_table,
    update_table,
)

console = Console()
logger = logging.getLogger("hubdb_sync")


# ============================================================================
# Shared helpers
# ============================================================================


def _configure_logging(debug: bool) -> None:
    """Route library logging through rich on stderr."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def _load_config(args: argparse.Namespace) -> HubDbConfig:
    """Load account config from the environment (``--use-env``) or TOML.

    Raises:
        ProfileNotFoundError: If ``--use-env`` is set but no credentials
            are present.
        FileNotFoundError: If the TOML config file doesn't exist.
    """
    if getattr(args, "use_env", False):
        config = get_environment_variable_config(os.environ)
        if config is None:
            raise ProfileNotFoundError(
                "No HubSpot credentials in environment. Set HUBSPOT_PORTAL_ID "
                "and HUBSPOT_ACCESS_TOKEN (or HUBSPOT_API_KEY)."
            )
        return config
    return load_hubdb_config(getattr(args, "config", None))


def _resolve_account(args: argparse.Namespace) -> tuple[str, AccountProfile]:
    """Resolve the account profile selected by the CLI arguments."""
    config = _load_config(args)
    return get_active_account(
        config,
        account=getattr(args, "account", None),
        environ=os.environ,
        env_prefix=getattr(args, "env_prefix", ""),
    )


async def _run_with_client(
    args: argparse.Namespace,
    action: Callable[[HubDbClient, int], Awaitable[int]],
) -> int:
    """Resolve the account, build a client, run ``action``, close the client.

    Configuration and ``HubDbError`` failures are printed and mapped to
    exit code 1.

    Args:
        args: Parsed CLI arguments.
        action: Coroutine function taking ``(client, account_id)`` and
            returning an exit code.

    Returns:
        Exit code from ``action``, or 1 on failure.
    """
    try:
        name, profile = _resolve_account(args)
    except (ProfileNotFoundError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    logger.debug("Using account %s (%s)", name, profile.account_id)
    client = get_client(profile)
    try:
        return await action(client, profile.account_id)
    except HubDbError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1
    finally:
        await client.close()


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_create(args: argparse.Namespace) -> int:
    """Async implementation for create command."""

    async def action(client: HubDbClient, account_id: int) -> int:
        result = await create_table(client, account_id, args.src)
        if result.has_errors:
            console.print(
                f"[bold red]x[/bold red] Created table "
                f"[bold cyan]{result.table_id}[/bold cyan] with "
                f"{len(result.errors)} row error(s):"
            )
            for error in result.errors:
                console.print(f"  - [yellow]{error.operation}[/yellow]: {error.message}")
            return 1

        console.print(
            f"[bold green]v[/bold green] Created table "
            f"[bold cyan]{result.table_id}[/bold cyan] from {args.src} "
            f"with {result.row_count} rows"
        )
        return 0

    return await _run_with_client(args, action)


async def _async_upload(args: argparse.Namespace) -> int:
    """Async implementation for upload command.

    Prints the reconciliation counts.  Returns 1 when any batch reported
    row-level errors, after listing them.
    """

    async def action(client: HubDbClient, account_id: int) -> int:
        report = await update_table(client, account_id, args.table_id, args.src)

        summary = Table(title="Row Sync", show_header=True, header_style="bold")
        summary.add_column("Operation", style="dim")
        summary.add_column("Planned", justify="right")
        summary.add_column("Applied", justify="right")
        summary.add_row("update", str(report.planned_updates), str(report.update_count))
        summary.add_row("create", str(report.planned_creations), str(report.create_count))
        summary.add_row("delete", str(report.planned_deletions), str(report.delete_count))
        console.print(summary)

        if report.has_errors:
            console.print(
                f"[bold red]x[/bold red] {len(report.errors)} row error(s) "
                f"uploading table {args.table_id}:"
            )
            for error in report.errors:
                console.print(f"  - [yellow]{error.operation}[/yellow]: {error.message}")
            return 1

        console.print(
            f"[bold green]v[/bold green] Uploaded table "
            f"[bold cyan]{args.table_id}[/bold cyan] from {args.src}, "
            f"{report.format_report()}"
        )
        return 0

    return await _run_with_client(args, action)


async def _async_fetch(args: argparse.Namespace) -> int:
    """Async implementation for fetch command."""

    async def action(client: HubDbClient, account_id: int) -> int:
        result = await download_table(client, account_id, args.table_id, args.dest)
        console.print(
            f"[bold green]v[/bold green] Downloaded table "
            f"[bold cyan]{args.table_id}[/bold cyan] to {result.file_path}"
        )
        return 0

    return await _run_with_client(args, action)


async def _async_clear(args: argparse.Namespace) -> int:
    """Async implementation for clear command."""

    async def action(client: HubDbClient, account_id: int) -> int:
        result = await clear_table_rows(client, account_id, args.table_id)
        console.print(
            f"[bold green]v[/bold green] Removed {result.deleted_row_count} rows "
            f"from table [bold cyan]{args.table_id}[/bold cyan]"
        )
        if args.publish:
            await publish_table(client, account_id, args.table_id)
            console.print("  Table published")
        return 0

    return await _run_with_client(args, action)


async def _async_publish(args: argparse.Namespace) -> int:
    """Async implementation for publish command."""

    async def action(client: HubDbClient, account_id: int) -> int:
        result = await publish_table(client, account_id, args.table_id)
        console.print(
            f"[bold green]v[/bold green] Published table "
            f"[bold cyan]{result.table_id}[/bold cyan] ({result.row_count} rows)"
        )
        return 0

    return await _run_with_client(args, action)


async def _async_delete(args: argparse.Namespace) -> int:
    """Async implementation for delete command."""
    if not args.confirm:
        console.print(
            f"[dim]To delete table[/dim] [bold]{args.table_id}[/bold][dim], "
            f"add[/dim] [cyan]--confirm[/cyan] [dim]flag.[/dim]"
        )
        return 0

    async def action(client: HubDbClient, account_id: int) -> int:
        await delete_table(client, account_id, args.table_id)
        console.print(
            f"[bold green]v[/bold green] Deleted table "
            f"[bold cyan]{args.table_id}[/bold cyan]"
        )
        return 0

    return await _run_with_client(args, action)


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_create(args: argparse.Namespace) -> int:
    """Create a table from a local document.

    Wraps the async implementation with ``asyncio.run()``.

    Returns:
        0 on success, 1 on failure or row-level errors.
    """
    return asyncio.run(_async_create(args))


def cmd_upload(args: argparse.Namespace) -> int:
    """Update a table's schema and rows from a local document.

    Wraps the async implementation with ``asyncio.run()``.

    Returns:
        0 on success, 1 on failure or row-level errors.
    """
    return asyncio.run(_async_upload(args))


def cmd_fetch(args: argparse.Namespace) -> int:
    """Download a table to a local document."""
    return asyncio.run(_async_fetch(args))


def cmd_clear(args: argparse.Namespace) -> int:
    """Delete every row of a table."""
    return asyncio.run(_async_clear(args))


def cmd_publish(args: argparse.Namespace) -> int:
    """Publish a table."""
    return asyncio.run(_async_publish(args))


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a table (requires ``--confirm``)."""
    return asyncio.run(_async_delete(args))


def cmd_accounts(args: argparse.Namespace) -> int:
    """List configured accounts.

    Reads only local config -- no network calls.

    Returns:
        0 on success, 1 if no config is available.
    """
    try:
        config = _load_config(args)
    except (ProfileNotFoundError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title="HubDB Accounts", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Account")
    table.add_column("Account ID", justify="right")
    table.add_column("Auth")
    table.add_column("Description")

    for name, profile in config.accounts.items():
        is_default = name == config.default_account
        table.add_row(
            "[bold green]*[/bold green]" if is_default else " ",
            f"[bold cyan]{name}[/bold cyan]" if is_default else name,
            str(profile.account_id),
            profile.auth_method,
            profile.description or "",
        )

    console.print(table)

    if config.default_account:
        console.print("\n[bold green]*[/bold green] = default account")

    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="hubdb-sync",
        description="Manage HubDB tables from local JSON documents",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to hubdb.toml (default: ./hubdb.toml)",
    )
    parser.add_argument(
        "--account",
        default=None,
        help="Account profile name from hubdb.toml",
    )
    parser.add_argument(
        "--use-env",
        action="store_true",
        help="Read credentials from HUBSPOT_* environment variables",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_HUBDB_ACCOUNT)"
        ),
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_create = subparsers.add_parser(
        "create", help="Create a table from a local document"
    )
    p_create.add_argument("src", help="Local path to the table document")
    p_create.set_defaults(func=cmd_create)

    p_upload = subparsers.add_parser(
        "upload", help="Update a table's schema and rows from a local document"
    )
    p_upload.add_argument("table_id", help="HubDB table ID")
    p_upload.add_argument("src", help="Local path to the table document")
    p_upload.set_defaults(func=cmd_upload)

    p_fetch = subparsers.add_parser(
        "fetch", help="Download a table and its rows to a local document"
    )
    p_fetch.add_argument("table_id", help="HubDB table ID")
    p_fetch.add_argument(
        "dest",
        nargs="?",
        default=None,
        help="Local destination (default: <table name>.hubdb.json)",
    )
    p_fetch.set_defaults(func=cmd_fetch)

    p_clear = subparsers.add_parser("clear", help="Delete every row of a table")
    p_clear.add_argument("table_id", help="HubDB table ID")
    p_clear.add_argument(
        "--publish",
        action="store_true",
        help="Publish the table after clearing its rows",
    )
    p_clear.set_defaults(func=cmd_clear)

    p_publish = subparsers.add_parser("publish", help="Publish a table")
    p_publish.add_argument("table_id", help="HubDB table ID")
    p_publish.set_defaults(func=cmd_publish)

    p_delete = subparsers.add_parser("delete", help="Delete a table")
    p_delete.add_argument("table_id", help="HubDB table ID")
    p_delete.add_argument(
        "--confirm",
        action="store_true",
        help="Actually delete the table",
    )
    p_delete.set_defaults(func=cmd_delete)

    p_accounts = subparsers.add_parser("accounts", help="List configured accounts")
    p_accounts.set_defaults(func=cmd_accounts)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.debug)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
