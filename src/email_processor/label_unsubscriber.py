"""
Label Unsubscriber

Processes every conversation under the watched label:
1. Read the first message's subject and body
2. Extract the unsubscribe link and dispatch the request
3. Append one audit record
4. Trash the conversation

A failure while processing one conversation is recorded as a "Failed"
audit row and never stops the batch. Failures before the batch starts
(missing label, unusable audit log) propagate to the caller.
"""

from datetime import datetime
from typing import Callable, Optional

from src.config.settings import AutomationConfig
from src.database.audit_log import AuditLog
from src.unsubscribe.constants import (
    AUDIT_LOG_COLUMNS, ERROR_SUBJECT, STATUS_ATTEMPTED, STATUS_FAILED, STATUS_NO_LINK
)
from src.unsubscribe.dispatcher import UnsubscribeDispatcher
from src.unsubscribe.extractors import LinkExtractor, RegexLinkExtractor
from src.unsubscribe.logging import UnsubscribeLogger
from src.unsubscribe.types import (
    AuditRecord, DispatchOutcome, LinkFailed, NoLinkFound, RunSummary
)
from .conversations import Conversation, ConversationSource


def status_for(outcome: DispatchOutcome) -> str:
    """
    Audit status for a dispatch outcome.

    LinkFollowed and LinkFailed share the same status string; only a
    missing link is distinguished.
    """
    if isinstance(outcome, NoLinkFound):
        return STATUS_NO_LINK
    return STATUS_ATTEMPTED


def failure_detail(error: Exception) -> str:
    """Message of an exception, or its class name when the message is empty."""
    return str(error) or type(error).__name__


class LabelUnsubscriber:
    """Unsubscribe from and trash every conversation under a label."""

    def __init__(
        self,
        config: AutomationConfig,
        source: ConversationSource,
        audit_log: AuditLog,
        extractor: Optional[LinkExtractor] = None,
        dispatcher: Optional[UnsubscribeDispatcher] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the unsubscriber.

        Args:
            config: Run settings (label, timeout, ...)
            source: Where the labelled conversations come from
            audit_log: Where one record per conversation is appended
            extractor: Link extractor (regex heuristic if omitted)
            dispatcher: Request dispatcher (built from config if omitted)
            clock: Timestamp source for audit records
        """
        self.config = config
        self.source = source
        self.audit_log = audit_log
        self.extractor = extractor or RegexLinkExtractor()
        # a dispatcher built here is closed at the end of run()
        self.owns_dispatcher = dispatcher is None
        self.dispatcher = dispatcher or UnsubscribeDispatcher(
            timeout=config.dispatch_timeout,
            user_agent=config.user_agent
        )
        self.clock = clock
        self.logger = UnsubscribeLogger("label_unsubscriber")
        self.logger.add_context("label", config.label_to_watch)

    def run(self) -> RunSummary:
        """Set up the audit log, then process the label."""
        try:
            self.audit_log.ensure_header(AUDIT_LOG_COLUMNS)
            return self.unsubscribe_and_delete()
        finally:
            if self.owns_dispatcher:
                self.dispatcher.close()

    def unsubscribe_and_delete(self) -> RunSummary:
        """Process every conversation under the label, in source order."""
        conversations = self.source.get_conversations_by_label(self.config.label_to_watch)
        self.logger.info(f"Processing {len(conversations)} email threads")

        counts = {'total': 0, 'attempted': 0, 'no_link': 0, 'failed': 0, 'link_errors': 0}
        with self.logger.time_operation("unsubscribe_and_delete"):
            for position, conversation in enumerate(conversations, start=1):
                counts['total'] += 1
                with self.logger.scoped_context({"conversation": position}):
                    try:
                        outcome = self.process_conversation(conversation)
                    except Exception as e:
                        self.logger.log_exception(e)
                        self._record(ERROR_SUBJECT, STATUS_FAILED, failure_detail(e))
                        counts['failed'] += 1
                        continue

                if isinstance(outcome, NoLinkFound):
                    counts['no_link'] += 1
                else:
                    counts['attempted'] += 1
                    if isinstance(outcome, LinkFailed):
                        counts['link_errors'] += 1

        summary = RunSummary(**counts)
        self.logger.info(summary.summary, {"summary": counts})
        return summary

    def process_conversation(self, conversation: Conversation) -> DispatchOutcome:
        """Unsubscribe, log and trash one conversation."""
        message = conversation.first_message()

        link = self.extractor.extract(message.body)
        outcome = self.dispatcher.dispatch(link)

        self._record(message.subject, status_for(outcome), '')
        conversation.discard()
        return outcome

    def _record(self, subject: str, status: str, detail: str):
        self.audit_log.append(AuditRecord(
            timestamp=self.clock(),
            subject=subject,
            status=status,
            detail=detail
        ))


def run(config: AutomationConfig, source: ConversationSource, audit_log: AuditLog, **kwargs) -> RunSummary:
    """Run the label unsubscriber once."""
    return LabelUnsubscriber(config, source, audit_log, **kwargs).run()
