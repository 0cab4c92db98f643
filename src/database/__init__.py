"""
Database initialization and management utilities.
"""

from sqlalchemy.orm import Session

from src.config import Config

from .models import create_database_engine, create_tables, get_session_maker, Base
from .audit_log import AuditLog, SqlAuditLog


class DatabaseManager:
    """Manages database connections for the audit log."""

    def __init__(self, database_url: str = None):
        if database_url is None:
            database_url = Config.get_database_path()

        self.database_url = database_url
        self.engine = create_database_engine(database_url)
        self.SessionMaker = get_session_maker(self.engine)

    def initialize_database(self):
        """Create all tables if they don't exist."""
        create_tables(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionMaker()


_db_manager = None


def get_db_manager(database_url: str = None) -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    return _db_manager


def init_database(database_url: str = None) -> str:
    """Create the audit log tables and return the database URL."""
    db_manager = get_db_manager(database_url)
    db_manager.initialize_database()
    return db_manager.database_url


__all__ = ['DatabaseManager', 'get_db_manager', 'init_database', 'AuditLog', 'SqlAuditLog', 'Base']
