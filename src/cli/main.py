"""
Main CLI group for the label unsubscriber.
"""

import click

from src.config.settings import Config
from src.unsubscribe.logging import configure_unsubscribe_logging
from .commands.admin import init
from .commands.log import log
from .commands.password import password
from .commands.run import run, watch


@click.group()
@click.version_option(version='1.0.0', prog_name='Label Unsubscriber')
@click.option('--log-level', default=None, help='Log level (default: LOG_LEVEL or INFO)')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also write logs to this file')
def cli(log_level, log_file):
    """
    Label Unsubscriber - follow unsubscribe links in labelled mail, then trash it.

    Every conversation under the watched label gets one unsubscribe attempt
    and one row in the audit log before it is moved to the trash.
    """
    configure_unsubscribe_logging(
        level=log_level or Config.LOG_LEVEL,
        format=Config.LOG_FORMAT,
        output='both' if log_file else 'console',
        filename=log_file
    )


cli.add_command(init, name='init')
cli.add_command(run, name='run')
cli.add_command(watch, name='watch')
cli.add_command(log, name='log')
cli.add_command(password, name='password')


if __name__ == '__main__':
    cli()
