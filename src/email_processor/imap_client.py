"""
IMAP connection, label selection and message retrieval.

Gmail exposes labels as IMAP mailboxes, so the watched label is selected
like a folder. Messages are fetched with BODY.PEEK[] so processing does not
mark them read.
"""

import imaplib
import email
import re
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import Message
from typing import Dict, List, Optional

from src.unsubscribe.exceptions import LabelNotFoundError, MailboxError
from src.unsubscribe.logging import UnsubscribeLogger
from src.unsubscribe.types import MessageContent

GMAIL_EXTENSION = 'X-GM-EXT-1'

THREAD_ID_PATTERN = re.compile(rb'UID (\d+).*?X-GM-THRID (\d+)|X-GM-THRID (\d+).*?UID (\d+)')


def quote_mailbox_name(name: str) -> str:
    """Quote a mailbox name for IMAP commands."""
    escaped = name.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def decode_imap_response(data) -> str:
    """Flatten an IMAP response payload into a readable string."""
    parts = []
    for item in data or []:
        if item is None:
            continue
        if isinstance(item, tuple):
            item = item[0]
        if isinstance(item, bytes):
            parts.append(item.decode('utf-8', errors='replace'))
        else:
            parts.append(str(item))
    return ' | '.join(parts).strip()


class IMAPConnection:
    """Manages the IMAP connection to the mailbox holding the watched label."""

    def __init__(self, server: str, port: int = 993, use_ssl: bool = True, timeout: Optional[int] = None):
        self.server = server
        self.port = port
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.connection = None
        self.logger = UnsubscribeLogger("imap")
        self.logger.add_context("server", server)

    def connect(self, username: str, password: str):
        """Connect to the IMAP server and authenticate."""
        try:
            if self.use_ssl:
                self.connection = imaplib.IMAP4_SSL(self.server, self.port, timeout=self.timeout)
            else:
                self.connection = imaplib.IMAP4(self.server, self.port, timeout=self.timeout)

            self.connection.login(username, password)
        except (imaplib.IMAP4.error, OSError) as e:
            self.connection = None
            raise MailboxError(f"Failed to connect to IMAP server: {e}", command='LOGIN',
                               context={"server": self.server}) from e

        self.logger.info("Connected to IMAP server", {"username": username})

    def disconnect(self):
        """Close the IMAP connection."""
        if not self.connection:
            return
        try:
            self.connection.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            self.logger.warning("Error during IMAP logout", {"error": str(e)})
        self.connection = None

    def _require_connection(self):
        if not self.connection:
            raise MailboxError("Not connected to IMAP server")
        return self.connection

    def supports_gmail_extensions(self) -> bool:
        connection = self._require_connection()
        return GMAIL_EXTENSION in getattr(connection, 'capabilities', ())

    def select_label(self, label: str):
        """Select the label's mailbox for read-write access."""
        connection = self._require_connection()
        try:
            status, data = connection.select(quote_mailbox_name(label))
        except imaplib.IMAP4.error as e:
            raise LabelNotFoundError(label, {"error": str(e)}) from e
        if status != 'OK':
            raise LabelNotFoundError(label, {"error": decode_imap_response(data)})

    def search_uids(self, criteria: str = 'ALL') -> List[int]:
        """Search the selected mailbox, returning UIDs in ascending order."""
        connection = self._require_connection()
        status, data = connection.uid('SEARCH', None, criteria)
        if status != 'OK':
            raise MailboxError(f"Search failed: {decode_imap_response(data)}", command='UID SEARCH')

        if not data or not data[0]:
            return []
        return sorted(int(uid) for uid in data[0].split())

    def fetch_thread_ids(self, uids: List[int]) -> Dict[int, int]:
        """Map UIDs to Gmail thread ids (X-GM-THRID)."""
        if not uids:
            return {}
        connection = self._require_connection()
        uid_set = ','.join(str(uid) for uid in uids)
        status, data = connection.uid('FETCH', uid_set, '(X-GM-THRID)')
        if status != 'OK':
            raise MailboxError(f"Thread lookup failed: {decode_imap_response(data)}", command='UID FETCH')

        thread_ids = {}
        for item in data or []:
            if isinstance(item, tuple):
                item = item[0]
            if not isinstance(item, bytes):
                continue
            match = THREAD_ID_PATTERN.search(item)
            if not match:
                continue
            if match.group(1):
                uid, thread_id = match.group(1), match.group(2)
            else:
                thread_id, uid = match.group(3), match.group(4)
            thread_ids[int(uid)] = int(thread_id)
        return thread_ids

    def fetch_message(self, uid: int) -> MessageContent:
        """Fetch one message by UID and return its subject and body."""
        connection = self._require_connection()
        status, msg_data = connection.uid('FETCH', str(uid), '(BODY.PEEK[])')
        if status != 'OK':
            raise MailboxError(f"Fetch failed for UID {uid}: {decode_imap_response(msg_data)}",
                               command='UID FETCH')

        raw_email = None
        for item in msg_data or []:
            if isinstance(item, tuple) and len(item) > 1:
                raw_email = item[1]
                break
        if raw_email is None:
            raise MailboxError(f"Message UID {uid} not found", command='UID FETCH')

        return parse_message(email.message_from_bytes(raw_email))

    def move_to_trash(self, uids: List[int], trash_folder: str):
        """Move messages to the trash mailbox (MOVE, else COPY + \\Deleted + EXPUNGE)."""
        connection = self._require_connection()
        uid_set = ','.join(str(uid) for uid in uids)
        target = quote_mailbox_name(trash_folder)

        try:
            status, data = connection.uid('MOVE', uid_set, target)
        except imaplib.IMAP4.error as e:
            # Server without the MOVE extension
            self.logger.debug("MOVE rejected, falling back to COPY", {"error": str(e)})
            status = 'NO'
        if status == 'OK':
            return

        status, data = connection.uid('COPY', uid_set, target)
        if status != 'OK':
            raise MailboxError(f"Copy to {trash_folder} failed: {decode_imap_response(data)}",
                               command='UID COPY')

        status, data = connection.uid('STORE', uid_set, '+FLAGS.SILENT', r'(\Deleted)')
        if status != 'OK':
            raise MailboxError(f"Flagging deleted failed: {decode_imap_response(data)}",
                               command='UID STORE')

        status, data = connection.expunge()
        if status != 'OK':
            raise MailboxError(f"Expunge failed: {decode_imap_response(data)}", command='EXPUNGE')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def decode_subject(value: Optional[str]) -> str:
    """Decode an RFC 2047 encoded Subject header, raw text if undecodable."""
    if not value:
        return ''
    try:
        return str(make_header(decode_header(value)))
    except (LookupError, HeaderParseError, UnicodeError):
        return str(value)


def parse_message(email_msg: Message) -> MessageContent:
    """Read the subject and body; the HTML part wins over plain text."""
    html_body = None
    text_body = None

    for part in email_msg.walk():
        if part.is_multipart():
            continue
        content_type = part.get_content_type()
        if content_type not in ('text/html', 'text/plain'):
            continue
        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        charset = part.get_content_charset() or 'utf-8'
        try:
            text = payload.decode(charset, errors='replace')
        except LookupError:
            text = payload.decode('utf-8', errors='replace')

        if content_type == 'text/html' and html_body is None:
            html_body = text
        elif content_type == 'text/plain' and text_body is None:
            text_body = text

    body = html_body if html_body is not None else (text_body or '')
    return MessageContent(subject=decode_subject(email_msg.get('Subject')), body=body)
