#!/usr/bin/env python3
"""
mudstore CLI

Moves the game's persistent data between JSON files, SQLite and PostgreSQL.
Stop the game server before running any command that writes.
"""

import functools

import click
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mudstore.codecs.room_state import ROOM_STATES
from mudstore.config import get_config
from mudstore.config.models import StorageConfig
from mudstore.exceptions import MudStoreError, create_error_context, handle_exception
from mudstore.migration.backend_state import BackendStateTracker
from mudstore.migration.orchestrator import MigrationOrchestrator
from mudstore.persistence.backend_kind import BackendKind
from mudstore.reporter import Reporter
from mudstore.structured_logging.enhanced_logging_config import configure_structlog, get_logger

logger = get_logger(__name__)

BACKEND_NAMES = ["json", "sqlite", "postgres", "documents", "embedded-relational", "networked-relational"]
BACKEND_CHOICE = click.Choice(BACKEND_NAMES, case_sensitive=False)


def resolve_current_backend(settings: StorageConfig) -> BackendKind:
    """
    Work out which backend the game server currently uses.

    Configuration wins, then the recorded backend state, then JSON files.
    """
    if settings.backend is not None:
        return settings.backend
    tracker = BackendStateTracker(settings.state_file)
    if tracker.exists():
        return tracker.read().current
    return BackendKind.DOCUMENTS


def handle_errors(func):
    """Turn storage failures into a one-line 'Error: ...' and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MudStoreError as exc:
            raise click.ClickException(exc.message) from exc
        except (SQLAlchemyError, OSError) as exc:
            error = handle_exception(exc, create_error_context(operation=func.__name__))
            logger.error("Command failed", error=error.message, error_type=type(exc).__name__)
            raise click.ClickException(error.message) from exc

    return wrapper


def _confirm_overwrite(description: str, force: bool, dry_run: bool, has_data) -> None:
    if force or dry_run:
        return
    if has_data():
        click.confirm(f"{description} already holds data that will be overwritten. Continue?", abort=True)


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False), help="Directory of JSON data files")
@click.option("--db-path", type=click.Path(dir_okay=False), help="SQLite database path (default: <data-dir>/game.db)")
@click.option("--db-url", help="PostgreSQL connection URL (overrides DATABASE_URL)")
@click.option("--backup-dir", type=click.Path(file_okay=False), help="Directory for timestamped backups")
@click.option("--verbose", "-v", is_flag=True, help="Detailed output and debug logging")
@click.option("--no-colors", is_flag=True, help="Disable colored output")
@click.pass_context
def main(ctx, data_dir, db_path, db_url, backup_dir, verbose: bool, no_colors: bool):
    """
    mudstore - storage backend migration tool

    Status, export, import, backup and switch the game's data between
    JSON files, SQLite and PostgreSQL.
    """
    try:
        config = get_config()
    except (ValidationError, MudStoreError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    configure_structlog(
        "DEBUG" if verbose else config.logging.level,
        config.logging.log_file,
        config.logging.format,
    )

    settings = config.storage.with_overrides(
        data_dir=data_dir,
        db_path=db_path,
        database_url=db_url,
        backup_dir=backup_dir,
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["reporter"] = Reporter(use_colors=not no_colors, verbose=verbose)


def _orchestrator(ctx) -> MigrationOrchestrator:
    settings = ctx.obj["settings"]
    current = resolve_current_backend(settings)
    logger.debug("Current backend resolved", backend=current.value)
    return MigrationOrchestrator(settings, current)


@main.command()
@click.pass_context
@handle_errors
def status(ctx):
    """Show the current backend and record counts in every backend."""
    report = _orchestrator(ctx).status()
    ctx.obj["reporter"].print_status(report)


@main.command("export")
@click.argument("source", required=False, type=BACKEND_CHOICE)
@click.option("--force", is_flag=True, help="Overwrite existing JSON files without confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@click.pass_context
@handle_errors
def export_command(ctx, source: str | None, force: bool, dry_run: bool):
    """Export a database (default: the current backend) to JSON files."""
    orchestrator = _orchestrator(ctx)
    reporter: Reporter = ctx.obj["reporter"]
    source_kind = BackendKind.parse(source) if source else orchestrator.current_backend

    reporter.print_header(f"Export: {source_kind.value} → json")
    if source_kind.is_relational:
        _confirm_overwrite(
            "The JSON data directory", force, dry_run, lambda: orchestrator.has_data(BackendKind.DOCUMENTS)
        )
    report = orchestrator.export_documents(source_kind, dry_run=dry_run)
    reporter.print_migration(report)


@main.command("import")
@click.argument("target", required=False, default="sqlite", type=BACKEND_CHOICE)
@click.option("--force", is_flag=True, help="Overwrite existing rows without confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@click.pass_context
@handle_errors
def import_command(ctx, target: str, force: bool, dry_run: bool):
    """Import JSON files into a database (default: sqlite)."""
    orchestrator = _orchestrator(ctx)
    reporter: Reporter = ctx.obj["reporter"]
    target_kind = BackendKind.parse(target)

    reporter.print_header(f"Import: json → {target_kind.value}")
    if target_kind.is_relational:
        description = f"The {target_kind.label} database"
        _confirm_overwrite(description, force, dry_run, lambda: orchestrator.has_data(target_kind))
    report = orchestrator.import_documents(target_kind, dry_run=dry_run)
    reporter.print_migration(report)


@main.command()
@click.option("--dry-run", is_flag=True, help="Show what would be copied without copying")
@click.pass_context
@handle_errors
def backup(ctx, dry_run: bool):
    """Create a timestamped backup of the data files and SQLite database."""
    reporter: Reporter = ctx.obj["reporter"]
    reporter.print_header("Backup")
    report = _orchestrator(ctx).backup(dry_run=dry_run)
    reporter.print_backup(report)


@main.command()
@click.argument("target", type=BACKEND_CHOICE)
@click.option("--force", is_flag=True, help="Overwrite data in the target without confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@click.pass_context
@handle_errors
def switch(ctx, target: str, force: bool, dry_run: bool):
    """Back up, migrate all data to TARGET and record it as the active backend."""
    orchestrator = _orchestrator(ctx)
    target_kind = BackendKind.parse(target)

    if target_kind is not orchestrator.current_backend:
        description = f"The {target_kind.label} database" if target_kind.is_relational else "The JSON data directory"
        _confirm_overwrite(description, force, dry_run, lambda: orchestrator.has_data(target_kind))
    report = orchestrator.switch(target_kind, dry_run=dry_run)
    ctx.obj["reporter"].print_switch(report)


@main.command("split-room-state")
@click.option("--clean-templates", is_flag=True, help="Remove state fields from rooms.json (a backup is kept)")
@click.option(
    "--extract-spawn-defaults", is_flag=True, help="With --clean-templates, keep current state as spawn defaults"
)
@click.option("--force", is_flag=True, help="Overwrite room_state.json without confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be done without writing files")
@click.pass_context
@handle_errors
def split_room_state(ctx, clean_templates: bool, extract_spawn_defaults: bool, force: bool, dry_run: bool):
    """Split mutable room state out of rooms.json into room_state.json."""
    orchestrator = _orchestrator(ctx)
    reporter: Reporter = ctx.obj["reporter"]
    reporter.print_header("Room State Migration")

    state_file = orchestrator.params.data_dir / ROOM_STATES.document_file
    _confirm_overwrite("room_state.json", force, dry_run, state_file.exists)
    report = orchestrator.split_room_state(
        clean_templates=clean_templates,
        extract_spawn_defaults=extract_spawn_defaults,
        dry_run=dry_run,
    )
    reporter.print_migration(report)


if __name__ == "__main__":
    main()
