"""
Conversation source: where the conversations under a label come from.

Conversation and ConversationSource are the interfaces the orchestration
routine consumes; the IMAP classes implement them on top of IMAPConnection.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.unsubscribe.logging import UnsubscribeLogger
from src.unsubscribe.types import MessageContent
from .imap_client import IMAPConnection


class Conversation(ABC):
    """A conversation (thread) tagged with the watched label."""

    @abstractmethod
    def first_message(self) -> MessageContent:
        """Subject and body of the conversation's first message."""
        pass

    @abstractmethod
    def discard(self) -> None:
        """Trash the whole conversation. Irreversible; no confirmation."""
        pass


class ConversationSource(ABC):
    """Yields the conversations tagged with a label."""

    @abstractmethod
    def get_conversations_by_label(self, label: str) -> List[Conversation]:
        """
        Return the label's conversations in processing order.

        Raises:
            LabelNotFoundError: if the label does not exist
        """
        pass


class IMAPConversation(Conversation):
    """Conversation backed by one or more message UIDs in the selected label."""

    def __init__(self, connection: IMAPConnection, uids: List[int], trash_folder: str):
        self.connection = connection
        self.uids = sorted(uids)
        self.trash_folder = trash_folder
        self._first_message: Optional[MessageContent] = None

    def first_message(self) -> MessageContent:
        # Fetched lazily so fetch errors surface while this conversation is processed
        if self._first_message is None:
            self._first_message = self.connection.fetch_message(self.uids[0])
        return self._first_message

    def discard(self) -> None:
        self.connection.move_to_trash(self.uids, self.trash_folder)

    def __repr__(self):
        return f"<IMAPConversation(uids={self.uids})>"


class IMAPConversationSource(ConversationSource):
    """
    Conversations from an IMAP mailbox.

    Messages are grouped by Gmail thread id when the server supports the
    Gmail extensions; otherwise each message is its own conversation.
    Conversations are ordered by their lowest UID.
    """

    def __init__(self, connection: IMAPConnection, trash_folder: str):
        self.connection = connection
        self.trash_folder = trash_folder
        self.logger = UnsubscribeLogger("conversation_source")

    def get_conversations_by_label(self, label: str) -> List[Conversation]:
        self.connection.select_label(label)
        uids = self.connection.search_uids()

        if uids and self.connection.supports_gmail_extensions():
            groups = self._group_by_thread(uids)
        else:
            groups = [[uid] for uid in uids]

        self.logger.debug("Conversations found", {
            "label": label,
            "messages": len(uids),
            "conversations": len(groups)
        })
        return [IMAPConversation(self.connection, group, self.trash_folder) for group in groups]

    def _group_by_thread(self, uids: List[int]) -> List[List[int]]:
        thread_ids = self.connection.fetch_thread_ids(uids)
        groups = {}
        for uid in uids:
            # UIDs without a thread id stay on their own
            key = thread_ids.get(uid, ('uid', uid))
            groups.setdefault(key, []).append(uid)
        return sorted(groups.values(), key=lambda group: group[0])
