"""
Audit log commands for the label unsubscriber.

Shows and exports the rows appended by previous runs.
"""

import click

from src.cli_session import get_cli_session_manager
from src.config.settings import Config
from src.database.audit_log import SqlAuditLog
from src.unsubscribe.constants import STATUS_FAILED


@click.group('log')
def log():
    """Audit log commands."""
    pass


@log.command('show')
@click.option('--limit', type=int, default=20, show_default=True, help='Number of newest rows to show')
@click.option('--sheet', 'sheet_index', type=int, help='Audit log sheet index')
def show_log(limit, sheet_index):
    """
    Show the newest audit log rows, oldest first.

    Example:
        python main.py log show --limit 50
    """
    if sheet_index is None:
        sheet_index = Config.LOG_SHEET_INDEX

    session_manager = get_cli_session_manager()
    session_manager.ensure_tables()

    with session_manager.get_session() as session:
        audit_log = SqlAuditLog(session, sheet_index)
        records = audit_log.records(limit=limit)

        if not records:
            click.echo("Audit log is empty.")
            return

        click.echo(f"\n{'Timestamp':<20} {'Status':<28} Email Subject")
        click.echo("-" * 80)
        for record in records:
            color = 'red' if record.status == STATUS_FAILED else None
            line = f"{record.timestamp:%Y-%m-%d %H:%M:%S}  {record.status:<28} {record.subject}"
            click.secho(line, fg=color)
            if record.detail:
                click.echo(f"{'':<22}{record.detail}")
        click.echo()


@log.command('export')
@click.argument('path', type=click.File('w', encoding='utf-8', lazy=False))
@click.option('--sheet', 'sheet_index', type=int, help='Audit log sheet index')
def export_log(path, sheet_index):
    """
    Export the audit log (header row included) to a CSV file.

    Use '-' to write to standard output.

    Example:
        python main.py log export unsubscribe_log.csv
    """
    if sheet_index is None:
        sheet_index = Config.LOG_SHEET_INDEX

    session_manager = get_cli_session_manager()
    session_manager.ensure_tables()

    with session_manager.get_session() as session:
        count = SqlAuditLog(session, sheet_index).export_csv(path)

    if path.name != '<stdout>':
        click.secho(f"✓ Exported {count} rows to {path.name}", fg='green')
