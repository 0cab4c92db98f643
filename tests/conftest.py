"""
Shared fixtures: in-memory audit log database and in-memory mailbox fakes.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database.models import Base
from src.email_processor.conversations import Conversation, ConversationSource
from src.unsubscribe.exceptions import LabelNotFoundError
from src.unsubscribe.types import MessageContent


class FakeConversation(Conversation):
    """Conversation held in memory; records whether it was discarded."""

    def __init__(self, subject='Newsletter', body='', error=None, discard_error=None):
        self.subject = subject
        self.body = body
        self.error = error
        self.discard_error = discard_error
        self.discarded = False

    def first_message(self) -> MessageContent:
        if self.error is not None:
            raise self.error
        return MessageContent(subject=self.subject, body=self.body)

    def discard(self) -> None:
        if self.discard_error is not None:
            raise self.discard_error
        self.discarded = True


class FakeConversationSource(ConversationSource):
    """Label -> conversations mapping held in memory."""

    def __init__(self, labels=None):
        self.labels = labels or {}
        self.requested = []

    def get_conversations_by_label(self, label):
        self.requested.append(label)
        if label not in self.labels:
            raise LabelNotFoundError(label)
        return list(self.labels[label])


class FixedClock:
    """Clock returning increasing timestamps one second apart."""

    def __init__(self, start=datetime(2024, 5, 1, 9, 30, 0)):
        self.current = start

    def __call__(self):
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def session():
    """Create an in-memory database session for testing."""
    engine = create_engine('sqlite:///:memory:')
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock()
