"""
Configuration settings for the label unsubscriber.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from src.unsubscribe.constants import (
    DEFAULT_DISPATCH_TIMEOUT, DEFAULT_LABEL, DEFAULT_LOG_SHEET_INDEX,
    DEFAULT_TRASH_FOLDER, DEFAULT_TRIGGER_INTERVAL_MINUTES, DEFAULT_USER_AGENT
)
from src.unsubscribe.exceptions import ConfigurationError


class Config:
    """Configuration settings, read from the process environment."""

    @classmethod
    def refresh(cls):
        """Re-read every setting from the environment (after a .env load)."""
        cls.DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///unsubscribe_log.db')
        cls.LABEL_TO_WATCH = os.getenv('LABEL_TO_WATCH', DEFAULT_LABEL)
        cls.LOG_SHEET_INDEX = int(os.getenv('LOG_SHEET_INDEX', str(DEFAULT_LOG_SHEET_INDEX)))
        cls.TRIGGER_INTERVAL_MINUTES = int(os.getenv('TRIGGER_INTERVAL_MINUTES', str(DEFAULT_TRIGGER_INTERVAL_MINUTES)))
        cls.IMAP_SERVER = os.getenv('IMAP_SERVER', 'imap.gmail.com')
        cls.IMAP_PORT = int(os.getenv('IMAP_PORT', '993'))
        cls.IMAP_TIMEOUT = int(os.getenv('IMAP_TIMEOUT', '30'))
        cls.TRASH_FOLDER = os.getenv('TRASH_FOLDER', DEFAULT_TRASH_FOLDER)
        cls.DISPATCH_TIMEOUT = float(os.getenv('DISPATCH_TIMEOUT', str(DEFAULT_DISPATCH_TIMEOUT)))
        cls.USER_AGENT = os.getenv('USER_AGENT', DEFAULT_USER_AGENT)
        cls.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        cls.LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')

    @classmethod
    def get_data_dir(cls) -> Path:
        """Get the data directory for storing the database and credentials."""
        data_dir = Path(os.getenv('DATA_DIR', Path.cwd() / 'data'))
        data_dir.mkdir(exist_ok=True)
        return data_dir

    @classmethod
    def get_database_path(cls) -> str:
        """Get the full database URL, resolving relative SQLite paths under DATA_DIR."""
        if cls.DATABASE_URL.startswith('sqlite:///'):
            db_file = cls.DATABASE_URL[10:]  # Remove 'sqlite:///'
            if db_file != ':memory:' and not os.path.isabs(db_file):
                db_path = cls.get_data_dir() / db_file
                return f"sqlite:///{db_path}"
        return cls.DATABASE_URL

    @classmethod
    def get_credential_store_path(cls) -> Path:
        """Get the path to the credential store file."""
        store_path = os.getenv('EMAIL_PSWD_STORE_PATH', 'email_passwords.json')

        # Expand {$DATA_DIR} variable if present
        if '{$DATA_DIR}' in store_path:
            store_path = store_path.replace('{$DATA_DIR}', str(cls.get_data_dir()))

        path = Path(store_path)
        if not path.is_absolute():
            path = cls.get_data_dir() / path

        return path


Config.refresh()


@dataclass(frozen=True)
class AutomationConfig:
    """
    Settings for one label-unsubscribe run.

    Passed explicitly to the orchestration entry point so tests and callers
    never depend on process-wide state.

    Attributes:
        label_to_watch: Mailbox label whose conversations are processed
        log_sheet_index: Audit log sheet the rows are appended to
        trigger_interval_minutes: Minutes between scheduled runs
        dispatch_timeout: Seconds before an unsubscribe request is abandoned
        trash_folder: Mailbox discarded conversations are moved to
        user_agent: User-Agent header sent with unsubscribe requests
    """

    label_to_watch: str = DEFAULT_LABEL
    log_sheet_index: int = DEFAULT_LOG_SHEET_INDEX
    trigger_interval_minutes: int = DEFAULT_TRIGGER_INTERVAL_MINUTES
    dispatch_timeout: float = DEFAULT_DISPATCH_TIMEOUT
    trash_folder: str = DEFAULT_TRASH_FOLDER
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not self.label_to_watch or not self.label_to_watch.strip():
            raise ConfigurationError("label_to_watch must not be empty")
        if self.log_sheet_index < 0:
            raise ConfigurationError("log_sheet_index must not be negative",
                                     {"log_sheet_index": self.log_sheet_index})
        if self.trigger_interval_minutes <= 0:
            raise ConfigurationError("trigger_interval_minutes must be positive",
                                     {"trigger_interval_minutes": self.trigger_interval_minutes})
        if self.dispatch_timeout <= 0:
            raise ConfigurationError("dispatch_timeout must be positive",
                                     {"dispatch_timeout": self.dispatch_timeout})

    @classmethod
    def from_env(cls, **overrides) -> 'AutomationConfig':
        """Build from Config, applying any non-None keyword overrides."""
        config = cls(
            label_to_watch=Config.LABEL_TO_WATCH,
            log_sheet_index=Config.LOG_SHEET_INDEX,
            trigger_interval_minutes=Config.TRIGGER_INTERVAL_MINUTES,
            dispatch_timeout=Config.DISPATCH_TIMEOUT,
            trash_folder=Config.TRASH_FOLDER,
            user_agent=Config.USER_AGENT
        )
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if overrides:
            config = replace(config, **overrides)
        return config


def load_config_from_env_file(env_file: str = '.env'):
    """Load environment variables from a .env file, if present."""
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)
        Config.refresh()
