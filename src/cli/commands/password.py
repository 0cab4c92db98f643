"""
Password commands for the label unsubscriber.

Scheduled runs read the IMAP password from the credential store.
"""

import click
from src.config.credentials import get_credential_store


@click.group()
def password():
    """IMAP password management commands."""
    pass


@password.command('store')
@click.argument('email')
def store_password(email):
    """
    Store the IMAP password (or app password) for an account.

    Example:
        python main.py password store user@gmail.com
    """
    password_value = click.prompt('Password', hide_input=True, confirmation_prompt=True)

    store = get_credential_store()
    store.set_password(email, password_value)

    click.secho(f"✓ Password stored for {email}", fg='green')
    click.echo(f"Credentials are saved in: {store.store_path}")


@password.command('remove')
@click.argument('email')
@click.option('--force', '-f', is_flag=True, help='Skip confirmation prompt')
def remove_password(email, force):
    """
    Remove the stored password for an account.

    Example:
        python main.py password remove user@gmail.com
    """
    if not force and not click.confirm(f"Remove password for {email}?"):
        click.echo("Cancelled.")
        raise click.Abort()

    if get_credential_store().remove_password(email):
        click.secho(f"✓ Password removed for {email}", fg='green')
    else:
        click.echo(f"No stored password for {email}.")


@password.command('list')
def list_passwords():
    """List accounts with a stored password."""
    accounts = get_credential_store().list_stored_emails()

    if not accounts:
        click.echo("No stored passwords.")
        return

    click.echo(f"\nStored passwords for {len(accounts)} account(s):")
    for email in accounts:
        click.echo(f"  - {email}")
