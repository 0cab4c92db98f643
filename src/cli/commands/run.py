"""
Run commands for the label unsubscriber.

Handles single runs and the scheduled watch loop.
"""

import click

from src.cli_session import get_cli_session_manager
from src.config.settings import AutomationConfig
from src.database.audit_log import SqlAuditLog
from src.email_processor.conversations import IMAPConversationSource
from src.email_processor.label_unsubscriber import run as run_label_unsubscriber
from src.scheduler import TriggerScheduler
from src.unsubscribe.constants import RUN_HANDLER_NAME
from src.unsubscribe.exceptions import UnsubscribeAutomationError
from src.unsubscribe.extractors import EXTRACTORS, get_extractor
from src.unsubscribe.types import RunSummary
from ..utils import get_password_for_account, open_imap_connection


def perform_run(email: str, password: str, config: AutomationConfig, extractor_name: str = 'regex') -> RunSummary:
    """Connect, process the watched label once and disconnect."""
    session_manager = get_cli_session_manager()
    session_manager.ensure_tables()

    with session_manager.get_session() as session:
        with open_imap_connection(email, password) as connection:
            return run_label_unsubscriber(
                config,
                IMAPConversationSource(connection, config.trash_folder),
                SqlAuditLog(session, config.log_sheet_index),
                extractor=get_extractor(extractor_name)
            )


def _echo_summary(summary: RunSummary):
    click.secho(f"✓ {summary.summary}", fg='green')
    if summary.link_errors:
        click.echo(f"  Unsubscribe requests without a response: {summary.link_errors}")


@click.command('run')
@click.option('--email', required=True, help='IMAP account to process')
@click.option('--label', help='Label to watch (default: LABEL_TO_WATCH)')
@click.option('--timeout', type=float, help='Unsubscribe request timeout in seconds')
@click.option('--sheet', 'sheet_index', type=int, help='Audit log sheet index')
@click.option('--extractor', type=click.Choice(sorted(EXTRACTORS)), default='regex',
              show_default=True, help='Link extraction strategy')
def run(email, label, timeout, sheet_index, extractor):
    """
    Unsubscribe from and trash every conversation under the label, once.

    Example:
        python main.py run --email user@gmail.com
        python main.py run --email user@gmail.com --label Newsletters --timeout 10
    """
    try:
        config = AutomationConfig.from_env(
            label_to_watch=label, dispatch_timeout=timeout, log_sheet_index=sheet_index
        )
        password = get_password_for_account(email)

        click.echo(f"\nProcessing label '{config.label_to_watch}' for {email}...")
        summary = perform_run(email, password, config, extractor)
    except UnsubscribeAutomationError as e:
        click.secho(f"✗ Run failed: {e}", fg='red')
        raise click.Abort()

    _echo_summary(summary)


@click.command('watch')
@click.option('--email', required=True, help='IMAP account to process')
@click.option('--label', help='Label to watch (default: LABEL_TO_WATCH)')
@click.option('--interval', type=int, help='Minutes between runs (default: TRIGGER_INTERVAL_MINUTES)')
@click.option('--extractor', type=click.Choice(sorted(EXTRACTORS)), default='regex',
              show_default=True, help='Link extraction strategy')
@click.option('--max-ticks', type=int, hidden=True, help='Stop after N scheduler checks')
def watch(email, label, interval, extractor, max_ticks):
    """
    Run now, then again every INTERVAL minutes until interrupted.

    The password must be stored (see 'password store') or is asked once.

    Example:
        python main.py watch --email user@gmail.com --interval 5
    """
    try:
        config = AutomationConfig.from_env(label_to_watch=label, trigger_interval_minutes=interval)
    except UnsubscribeAutomationError as e:
        click.secho(f"✗ {e}", fg='red')
        raise click.Abort()

    password = get_password_for_account(email)

    def scheduled_run():
        summary = perform_run(email, password, config, extractor)
        _echo_summary(summary)

    scheduler = TriggerScheduler({RUN_HANDLER_NAME: scheduled_run})

    # First run happens immediately; failures are retried at the next tick
    scheduler.run_handler(RUN_HANDLER_NAME)
    scheduler.ensure_recurring_trigger(RUN_HANDLER_NAME, config.trigger_interval_minutes)

    click.echo(f"Watching label '{config.label_to_watch}' every "
               f"{config.trigger_interval_minutes} minutes (Ctrl+C to stop)")
    try:
        scheduler.run_forever(max_iterations=max_ticks)
    except KeyboardInterrupt:
        click.echo("Stopped.")
