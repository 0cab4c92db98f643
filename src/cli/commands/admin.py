"""
Admin commands for the label unsubscriber.

Handles database initialization.
"""

import click
from src.database import init_database


@click.command('init')
def init():
    """
    Initialize the audit log database.

    Example:
        python main.py init
    """
    try:
        db_url = init_database()
    except Exception as e:
        click.secho(f"✗ Error initializing database: {e}", fg='red')
        raise click.Abort()

    click.secho("✓ Database initialized successfully", fg='green')
    click.echo(f"Database location: {db_url}")
