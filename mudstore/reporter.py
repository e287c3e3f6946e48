"""
Console reporter for migration results.

Formats the report objects returned by the orchestrator for an operator
watching the terminal.
"""

import click

from mudstore.migration.reports import BackupReport, MigrationReport, StatusReport, SwitchReport
from mudstore.persistence.backend_kind import BackendKind


class Reporter:
    """
    Formats and displays migration results.
    """

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        """
        Initialize the reporter.

        Args:
            use_colors: Whether to use ANSI color codes
            verbose: Also list every skipped record
        """
        self.use_colors = use_colors
        self.verbose = verbose

    def _echo(self, message: str = "", fg: str | None = None, bold: bool = False, err: bool = False):
        if self.use_colors and (fg or bold):
            message = click.style(message, fg=fg, bold=bold)
        click.echo(message, err=err)

    def print_header(self, title: str):
        """Print a section header."""
        self._echo(f"\n=== {title} ===", bold=True)

    def print_warning(self, message: str):
        self._echo(f"⚠️  {message}", fg="yellow")

    def print_success(self, message: str):
        self._echo(f"✅ {message}", fg="green")

    def print_step(self, number: int, message: str):
        self._echo(f"\nStep {number}: {message}", bold=True)

    def print_dry_run_banner(self):
        self._echo("[DRY RUN] No changes will be written.", fg="cyan")

    def print_status(self, report: StatusReport):
        """Print backend configuration and per-entity record counts."""
        self.print_header("Data Status")
        self._echo(f"Current backend: {report.current.value.upper()}")
        if report.state is not None:
            previous = report.state.previous.value if report.state.previous else "-"
            self._echo(
                f"Recorded state:  {report.state.current.value} "
                f"(previous: {previous}, migrated: {report.state.migrated_at or '-'})"
            )
        self._echo(f"SQLite path:     {report.sqlite_path}")
        self._echo(f"Database URL:    {report.database_url or '(not set)'}")

        for status in report.backends:
            self._echo(f"\n{status.kind.label} ({status.location}):", bold=True)
            if status.error:
                self._echo(f"  (error reading backend: {status.error})", fg="red")
                continue
            for entity, count in status.counts.items():
                if entity in status.entity_errors:
                    self._echo(f"  {entity}: (unreadable: {status.entity_errors[entity]})", fg="red")
                elif count is None:
                    self._echo(f"  {entity}: (not found)")
                else:
                    self._echo(f"  {entity}: {count} records")

        if report.backend(BackendKind.EMBEDDED) is None:
            self._echo("\nSQLite: (not found)")

    def print_migration(self, report: MigrationReport):
        """Print per-entity counts for an export, import or room state split."""
        if report.dry_run:
            self.print_dry_run_banner()
        if report.nothing_to_do:
            self._echo("Current backend is JSON. Nothing to export.")
            return
        if report.created_tables:
            self._echo(f"Created tables: {', '.join(report.created_tables)}")

        verb = "would be written" if report.dry_run else "written"
        for outcome in report.outcomes:
            if outcome.missing:
                self._echo(f"  {outcome.label}: (source not found, skipped)")
                continue
            line = f"  {outcome.label}: {outcome.count} records {verb}"
            if outcome.seeded:
                line += " (defaults)"
            self._echo(line)
            if outcome.skipped:
                self.print_warning(f"  {outcome.label}: {outcome.skipped} records skipped")
                if self.verbose:
                    for error in outcome.errors:
                        self._echo(f"      - {error}", fg="yellow")

        summary = f"{report.total} records {verb}"
        if report.total_skipped:
            summary += f", {report.total_skipped} skipped"
        if report.dry_run:
            self._echo(f"\n[DRY RUN] {summary}.", fg="cyan")
        else:
            self.print_success(f"{report.operation.replace('_', ' ').capitalize()} complete: {summary}.")

    def print_backup(self, report: BackupReport):
        """Print where a backup went and what it holds."""
        self._echo(f"Backup location: {report.path}")
        for name in report.files:
            prefix = "  would copy" if report.dry_run else "  ✓"
            self._echo(f"{prefix} {name}")
        if not report.files:
            self._echo("  (no data files found)")
        if report.dry_run:
            self._echo("[DRY RUN] No backup created.", fg="cyan")
        else:
            self.print_success("Backup complete.")

    def print_instructions(self, lines: list[str]):
        """Print the configuration the game server needs after a switch."""
        self._echo("\nUpdate your configuration (environment or .env file):", bold=True)
        for line in lines:
            self._echo(f"    {line}")

    def print_switch(self, report: SwitchReport):
        """Print each step of a backend switch."""
        self.print_header(f"Switching Backend: {report.source.value} → {report.target.value}")
        if report.dry_run:
            self.print_dry_run_banner()
        if report.no_op:
            self._echo("Already using this backend. Nothing to do.")
            return

        self.print_step(1, "Creating backup")
        if report.backup is not None:
            self.print_backup(report.backup)

        self.print_step(2, "Exporting from current backend")
        if report.export is None:
            self._echo("  (Source is JSON files, no export needed)")
        else:
            self.print_migration(report.export)

        self.print_step(3, "Importing to target backend")
        if report.import_report is None:
            self._echo("  (Target is JSON files, no import needed)")
        else:
            self.print_migration(report.import_report)

        self.print_step(4, "Update your configuration")
        self.print_instructions(report.instructions)
        if report.dry_run:
            self._echo("\n[DRY RUN] Backend state not recorded.", fg="cyan")
        else:
            self.print_success("Switch complete! Restart the server to use the new backend.")
