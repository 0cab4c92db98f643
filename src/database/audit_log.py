"""
Audit log: the append-only table of processed conversations.

The AuditLog interface is what the orchestration routine writes to.
SqlAuditLog stores it through SQLAlchemy, one LogSheet per sheet index
holding the header and the appended AuditEntry rows.
"""

import csv
import json
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.unsubscribe.exceptions import AuditLogError
from src.unsubscribe.logging import UnsubscribeLogger
from src.unsubscribe.types import AuditRecord
from .models import AuditEntry, LogSheet


class AuditLog(ABC):
    """Append-only tabular store of audit records."""

    @abstractmethod
    def ensure_header(self, columns: List[str]) -> None:
        """Write the header once; calling again on a set-up log is a no-op."""
        pass

    @abstractmethod
    def append(self, record: AuditRecord) -> None:
        """Append one record. Failures raise; they are never silent."""
        pass


class SqlAuditLog(AuditLog):
    """Audit log persisted in the log_sheets / audit_entries tables."""

    def __init__(self, session: Session, sheet_index: int = 0):
        """
        Initialize the audit log.

        Args:
            session: Database session
            sheet_index: Which log sheet rows are written to
        """
        self.session = session
        self.sheet_index = sheet_index
        self.logger = UnsubscribeLogger("audit_log")
        self.logger.add_context("sheet_index", sheet_index)

    def _get_sheet(self) -> Optional[LogSheet]:
        return self.session.query(LogSheet).filter_by(sheet_index=self.sheet_index).first()

    def ensure_header(self, columns: List[str]) -> None:
        try:
            if self._get_sheet() is not None:
                self.logger.info("Log sheet already set up")
                return

            self.session.add(LogSheet(sheet_index=self.sheet_index, header_json=json.dumps(list(columns))))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise AuditLogError(f"Could not set up log sheet: {e}", sheet_index=self.sheet_index) from e

        self.logger.info("Headers added to the log sheet", {"columns": list(columns)})

    def append(self, record: AuditRecord) -> None:
        try:
            sheet = self._get_sheet()
            if sheet is None:
                raise AuditLogError("Log sheet has no header; call ensure_header first",
                                    sheet_index=self.sheet_index)

            self.session.add(AuditEntry(
                sheet_id=sheet.id,
                timestamp=record.timestamp,
                email_subject=record.subject,
                status=record.status,
                detail=record.detail
            ))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise AuditLogError(f"Could not append audit record: {e}", sheet_index=self.sheet_index) from e

    def header(self) -> List[str]:
        sheet = self._get_sheet()
        return sheet.header if sheet is not None else []

    def records(self, limit: Optional[int] = None) -> List[AuditRecord]:
        """
        Return the appended records, oldest first.

        Args:
            limit: Keep only the newest N records (still oldest first)
        """
        sheet = self._get_sheet()
        if sheet is None:
            return []

        query = self.session.query(AuditEntry).filter_by(sheet_id=sheet.id)
        if limit is not None:
            entries = query.order_by(AuditEntry.id.desc()).limit(limit).all()
            entries.reverse()
        else:
            entries = query.order_by(AuditEntry.id).all()

        return [
            AuditRecord(
                timestamp=entry.timestamp,
                subject=entry.email_subject or '',
                status=entry.status,
                detail=entry.detail or ''
            )
            for entry in entries
        ]

    def export_csv(self, stream: TextIO) -> int:
        """
        Write the header row and every record to a CSV stream.

        Returns:
            Number of records written (header excluded)
        """
        writer = csv.writer(stream)
        header = self.header()
        if header:
            writer.writerow(header)

        records = self.records()
        for record in records:
            timestamp, subject, status, detail = record.to_row()
            writer.writerow([timestamp.isoformat(sep=' ', timespec='seconds'), subject, status, detail])
        return len(records)
