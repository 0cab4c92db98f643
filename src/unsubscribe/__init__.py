"""
Unsubscribe link extraction and dispatch.

This module provides the core of the label unsubscriber:
- Link extraction from message body markup
- Dispatch of a single bounded GET request per link
- Outcome and audit record value types
"""

from .extractors import LinkExtractor, RegexLinkExtractor, SoupLinkExtractor, get_extractor
from .dispatcher import UnsubscribeDispatcher
from .types import (
    AuditRecord, DispatchOutcome, LinkFailed, LinkFollowed, MessageContent,
    NoLinkFound, RunSummary
)

__all__ = [
    'LinkExtractor',
    'RegexLinkExtractor',
    'SoupLinkExtractor',
    'get_extractor',
    'UnsubscribeDispatcher',
    'AuditRecord',
    'DispatchOutcome',
    'LinkFailed',
    'LinkFollowed',
    'MessageContent',
    'NoLinkFound',
    'RunSummary'
]
