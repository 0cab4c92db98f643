"""
Type-safe dataclasses for unsubscribe automation results.

This module provides the immutable value types that flow through one
conversation's processing: the message content handed over by the
conversation source, the dispatch outcome, and the audit record.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

# A single URL string, trimmed of surrounding whitespace
UnsubscribeLink = str


@dataclass(frozen=True)
class MessageContent:
    """Subject and raw body markup of a conversation's first message."""

    subject: str
    body: str


@dataclass(frozen=True)
class DispatchOutcome:
    """Base class for the result of an unsubscribe dispatch."""

    @property
    def link_found(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {'outcome': type(self).__name__}


@dataclass(frozen=True)
class LinkFollowed(DispatchOutcome):
    """A link was found and the remote endpoint answered (any status code)."""

    url: str
    status_code: int

    def to_dict(self) -> Dict[str, Any]:
        return {'outcome': 'LinkFollowed', 'url': self.url, 'status_code': self.status_code}


@dataclass(frozen=True)
class LinkFailed(DispatchOutcome):
    """A link was found but the request never produced a response."""

    url: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'outcome': 'LinkFailed', 'url': self.url, 'reason': self.reason}


@dataclass(frozen=True)
class NoLinkFound(DispatchOutcome):
    """No unsubscribe link was present in the message body."""

    @property
    def link_found(self) -> bool:
        return False


@dataclass(frozen=True)
class AuditRecord:
    """One row of the audit log."""

    timestamp: datetime
    subject: str
    status: str
    detail: str = ''

    def to_row(self) -> List[Any]:
        """Row values in audit-log column order."""
        return [self.timestamp, self.subject, self.status, self.detail]


@dataclass(frozen=True)
class RunSummary:
    """Counts collected over one run of the orchestration routine."""

    total: int = 0
    attempted: int = 0
    no_link: int = 0
    failed: int = 0
    link_errors: int = 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the run."""
        return (
            f"Processed {self.total} conversations: "
            f"{self.attempted} attempted, {self.no_link} without link, "
            f"{self.failed} failed"
        )


def coerce_link(value: Optional[str]) -> Optional[UnsubscribeLink]:
    """Trim a raw href value; empty or blank values count as no link."""
    if value is None:
        return None
    link = value.strip()
    return link or None
