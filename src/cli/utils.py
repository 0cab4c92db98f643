"""
Common utilities for CLI commands.
"""

import getpass

import click

from src.config import Config
from src.config.credentials import get_credential_store
from src.email_processor.imap_client import IMAPConnection


def get_password_for_account(email_address: str, interactive: bool = True) -> str:
    """
    Get the IMAP password for an account, checking the credential store first.

    Args:
        email_address: Account to log in as
        interactive: Prompt when nothing is stored

    Raises:
        click.ClickException: nothing stored and prompting disabled
    """
    stored_password = get_credential_store().get_password(email_address)
    if stored_password:
        return stored_password

    if not interactive:
        raise click.ClickException(
            f"No stored password for {email_address}; run: python main.py password store {email_address}"
        )
    return getpass.getpass(f"Password for {email_address}: ")


def open_imap_connection(email_address: str, password: str) -> IMAPConnection:
    """Connect and log in to the configured IMAP server."""
    connection = IMAPConnection(Config.IMAP_SERVER, Config.IMAP_PORT, timeout=Config.IMAP_TIMEOUT)
    connection.connect(email_address, password)
    return connection
