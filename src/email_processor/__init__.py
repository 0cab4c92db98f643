"""
Email processing modules.
"""

from .imap_client import IMAPConnection
from .conversations import Conversation, ConversationSource, IMAPConversation, IMAPConversationSource
from .label_unsubscriber import LabelUnsubscriber, run, status_for

__all__ = [
    'IMAPConnection',
    'Conversation',
    'ConversationSource',
    'IMAPConversation',
    'IMAPConversationSource',
    'LabelUnsubscriber',
    'run',
    'status_for'
]
