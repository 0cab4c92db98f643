"""
Constants and shared configuration for unsubscribe automation.

This module contains the link pattern, audit-log vocabulary and default
settings used across extraction, dispatch and orchestration.
"""

import re
from typing import List, Pattern

# Anchor with a double-quoted href whose span mentions "unsubscribe".
# Not multiline and not DOTALL: the anchor must sit on a single line.
UNSUBSCRIBE_ANCHOR_PATTERN: Pattern = re.compile(
    r'<a\s+(?:[^>]*?\s+)?href="([^"]*)"[^>]*>(?:.*?unsubscribe.*?)</a>',
    re.IGNORECASE
)

UNSUBSCRIBE_KEYWORD = 'unsubscribe'

# Audit log vocabulary
AUDIT_LOG_COLUMNS: List[str] = ['Timestamp', 'Email Subject', 'Status', 'Detail']

STATUS_ATTEMPTED = 'Attempted to Unsubscribe'
STATUS_NO_LINK = 'No Unsubscribe Link Found'
STATUS_FAILED = 'Failed'
ERROR_SUBJECT = 'Error processing email'

# Defaults
DEFAULT_LABEL = 'Unsubscribe'
DEFAULT_LOG_SHEET_INDEX = 0
DEFAULT_TRIGGER_INTERVAL_MINUTES = 5
DEFAULT_DISPATCH_TIMEOUT = 25
DEFAULT_TRASH_FOLDER = '[Gmail]/Trash'
DEFAULT_USER_AGENT = 'LabelUnsubscriber/1.0 (+https://github.com/)'

# Name the recurring trigger is registered under
RUN_HANDLER_NAME = 'run'
