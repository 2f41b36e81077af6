"""CLI for running and inspecting MySQL dump pipelines.

Usage:
    db-dump databases --config dump.toml
    db-dump show --config dump.toml --database shop
    db-dump run --config dump.toml
    db-dump -v run --config dump.toml --database shop --database crm

Commands:
    databases - List configured databases
    show      - Print the planned pipeline without running it
    run       - Run the dump pipeline for each selected database
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from db_dump.compression import create_compressor
from db_dump.config.loader import load_dump_config
from db_dump.config.models import BackupConfig, DumpConfig
from db_dump.dump import perform_dump, plan_dump
from db_dump.encryption import AgeEncryptor
from db_dump.errors import DumpError
from db_dump.utilities import Utilities

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _load(args: argparse.Namespace) -> DumpConfig | None:
    try:
        return load_dump_config(Path(args.config))
    except (FileNotFoundError, DumpError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


def _select(config: DumpConfig, wanted: list[str] | None) -> list[BackupConfig] | None:
    """Databases named by ``--database`` (all when none given)."""
    if not wanted:
        return list(config.databases.values())

    unknown = [name for name in wanted if name not in config.databases]
    if unknown:
        available = ", ".join(config.databases.keys())
        console.print(
            f"[red]Unknown database(s): {', '.join(unknown)}. Available: {available}[/red]"
        )
        return None
    return [config.databases[name] for name in wanted]


def _collaborators(config: DumpConfig, utilities: Utilities):
    compressor = (
        create_compressor(config.compression, utilities) if config.compression else None
    )
    encryptor = (
        AgeEncryptor.from_settings(config.encryption, utilities) if config.encryption else None
    )
    return compressor, encryptor


# ============================================================================
# Commands
# ============================================================================


def cmd_databases(args: argparse.Namespace) -> int:
    """List databases from the config file.

    Returns:
        0 on success, 1 if the config cannot be loaded.
    """
    config = _load(args)
    if config is None:
        return 1

    table = Table(title=f"Databases ({config.dump_path})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Engine")
    table.add_column("Incremental")
    table.add_column("Sudo user")
    for database_id, database in config.databases.items():
        table.add_row(
            database_id,
            database.name,
            database.engine.value,
            "yes" if database.incremental else "no",
            database.sudo_user or "-",
        )
    console.print(table)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print each planned pipeline stage, passwords masked.

    Returns:
        0 on success, 1 on any configuration error.
    """
    config = _load(args)
    if config is None:
        return 1
    databases = _select(config, args.databases)
    if databases is None:
        return 1

    utilities = Utilities(config.utilities)
    exit_code = 0
    for database in databases:
        console.print(f"\n[bold]{database.dump_filename}[/bold] ({database.engine.value})")
        try:
            compressor, encryptor = _collaborators(config, utilities)
            plan = plan_dump(
                database,
                config.dump_path,
                utilities,
                compressor=compressor,
                encryptor=encryptor,
            )
        except DumpError as e:
            console.print(f"  [red]x[/red] {e}")
            exit_code = 1
            continue

        stages = [plan.dump_stage, *plan.transform_stages]
        for index, stage in enumerate(stages, start=1):
            console.print(f"  [cyan]{index}. {stage.label}[/cyan]")
            console.print(f"     {stage.render(mask=True)}", markup=False, highlight=False)
        console.print(f"  [dim]-> {plan.artifact_path}[/dim]")
    return exit_code


def cmd_run(args: argparse.Namespace) -> int:
    """Run the dump pipeline for each selected database.

    A failing database does not stop the remaining ones.

    Returns:
        0 if every dump succeeded, 1 otherwise.
    """
    config = _load(args)
    if config is None:
        return 1
    databases = _select(config, args.databases)
    if databases is None:
        return 1

    utilities = Utilities(config.utilities)
    failures = 0
    for database in databases:
        try:
            compressor, encryptor = _collaborators(config, utilities)
            outcome = perform_dump(
                database,
                config.dump_path,
                utilities,
                compressor=compressor,
                encryptor=encryptor,
            )
        except DumpError as e:
            failures += 1
            console.print(f"[bold red]x[/bold red] {database.dump_filename}")
            console.print(str(e), markup=False, highlight=False)
            continue
        console.print(f"[bold green]v[/bold green] {database.dump_filename} -> {outcome.artifact_path}")

    if failures:
        console.print(f"\n[red]{failures} of {len(databases)} dump(s) failed[/red]")
        return 1
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="db-dump",
        description="MySQL dump pipelines (mysqldump, innobackupex, xtrabackup)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_config(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--config",
            "-c",
            required=True,
            help="Path to the TOML dump configuration",
        )

    def add_databases(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--database",
            "-d",
            action="append",
            dest="databases",
            help="Database ID from [databases.<id>] (can be used multiple times)",
        )

    # databases command
    p_databases = subparsers.add_parser("databases", help="List configured databases")
    add_config(p_databases)
    p_databases.set_defaults(func=cmd_databases)

    # show command
    p_show = subparsers.add_parser("show", help="Print the planned pipeline without running it")
    add_config(p_show)
    add_databases(p_show)
    p_show.set_defaults(func=cmd_show)

    # run command
    p_run = subparsers.add_parser("run", help="Run the dump pipeline")
    add_config(p_run)
    add_databases(p_run)
    p_run.set_defaults(func=cmd_run)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
