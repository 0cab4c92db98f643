"""
Credential storage for the IMAP account the unsubscriber logs into.

Scheduled runs cannot prompt for a password, so the password is kept in a
JSON file readable only by its owner.
"""

import json
import os
from pathlib import Path
from typing import Optional, Dict, List

from src.unsubscribe.logging import UnsubscribeLogger


class CredentialStore:
    """Stores IMAP passwords keyed by lower-cased email address."""

    def __init__(self, store_path: Optional[Path] = None):
        """
        Initialize credential store.

        Args:
            store_path: JSON file holding the credentials. None keeps them
                        in memory only.
        """
        self.store_path = store_path
        self.logger = UnsubscribeLogger("credentials")
        self._credentials: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.store_path or not self.store_path.exists():
            return {}
        try:
            with open(self.store_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self.logger.warning("Credential store unreadable, starting empty",
                                {"path": str(self.store_path), "error": str(e)})
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self):
        if not self.store_path:
            return

        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, 'w') as f:
            json.dump(self._credentials, f, indent=2)

        # owner read/write only
        os.chmod(self.store_path, 0o600)

    def get_password(self, email_address: str) -> Optional[str]:
        return self._credentials.get(email_address.lower())

    def set_password(self, email_address: str, password: str):
        self._credentials[email_address.lower()] = password
        self._save()

    def remove_password(self, email_address: str) -> bool:
        """
        Remove the stored password for an address.

        Returns:
            True if a password was removed, False if none was stored
        """
        email_lower = email_address.lower()
        if email_lower not in self._credentials:
            return False
        del self._credentials[email_lower]
        self._save()
        return True

    def has_password(self, email_address: str) -> bool:
        return email_address.lower() in self._credentials

    def list_stored_emails(self) -> List[str]:
        return sorted(self._credentials.keys())


_credential_store = None


def get_credential_store(store_path: Optional[Path] = None) -> CredentialStore:
    """
    Get the process-wide credential store.

    Args:
        store_path: Path to the credential file. Only used on first call;
                    defaults to Config.get_credential_store_path().
    """
    global _credential_store

    if _credential_store is None:
        if store_path is None:
            from .settings import Config
            store_path = Config.get_credential_store_path()
        _credential_store = CredentialStore(store_path)

    return _credential_store
