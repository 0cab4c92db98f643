"""
Database models for the unsubscribe audit log.
"""

import json
from sqlalchemy import (
    Column, Integer, String, DateTime, Text, ForeignKey, create_engine, Index
)
from sqlalchemy.orm import relationship, sessionmaker, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LogSheet(Base):
    """A log sheet: the header row shared by all of its entries."""
    __tablename__ = 'log_sheets'

    id = Column(Integer, primary_key=True)
    sheet_index = Column(Integer, unique=True, nullable=False)
    header_json = Column(Text, nullable=False)  # JSON list of column names
    created_at = Column(DateTime, default=func.now())

    # Relationships
    entries = relationship("AuditEntry", back_populates="sheet",
                           cascade="all, delete-orphan", order_by="AuditEntry.id")

    @property
    def header(self):
        return json.loads(self.header_json)

    def __repr__(self):
        return f"<LogSheet(index={self.sheet_index}, header={self.header})>"


class AuditEntry(Base):
    """One appended audit row. Entries are never updated or deleted."""
    __tablename__ = 'audit_entries'

    id = Column(Integer, primary_key=True)  # insertion order
    sheet_id = Column(Integer, ForeignKey('log_sheets.id'), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    email_subject = Column(Text)
    status = Column(String(100), nullable=False)
    detail = Column(Text, default='')

    # Relationships
    sheet = relationship("LogSheet", back_populates="entries")

    __table_args__ = (
        Index('idx_sheet_entries', 'sheet_id', 'id'),
        Index('idx_entry_status', 'status'),
    )

    def __repr__(self):
        return f"<AuditEntry(status='{self.status}', subject='{(self.email_subject or '')[:50]}')>"


def create_database_engine(database_url: str = "sqlite:///unsubscribe_log.db"):
    """Create and return a database engine."""
    engine = create_engine(
        database_url,
        echo=False,  # Set to True for SQL debugging
        pool_pre_ping=True,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    return engine


def create_tables(engine):
    """Create all tables in the database."""
    Base.metadata.create_all(engine)


def get_session_maker(engine):
    """Get a session maker for the database."""
    return sessionmaker(bind=engine)
