"""
Custom exceptions for unsubscribe automation with enhanced error context.

This module provides structured exception classes that carry context
information for better debugging and for the audit log detail column.
"""

from typing import Dict, Any, Optional


class UnsubscribeAutomationError(Exception):
    """Base exception for all unsubscribe automation failures."""
    
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context
    
    def __str__(self) -> str:
        base_message = super().__str__()
        if self.context is not None and self.context:
            context_info = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_message} (context: {context_info})"
        return base_message


class ConfigurationError(UnsubscribeAutomationError):
    """Exception raised when configuration values are invalid."""


class LabelNotFoundError(UnsubscribeAutomationError):
    """Exception raised when the watched label does not exist in the mailbox."""
    
    def __init__(self, label: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Label not found: {label}", context)
        self.label = label


class MailboxError(UnsubscribeAutomationError):
    """Exception raised when an IMAP command fails."""
    
    def __init__(self, message: str, command: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.command = command
    
    def __str__(self) -> str:
        base_message = super().__str__()
        if self.command:
            return f"{base_message} [command={self.command}]"
        return base_message


class AuditLogError(UnsubscribeAutomationError):
    """Exception raised when the audit log cannot be read or written."""
    
    def __init__(self, message: str, sheet_index: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.sheet_index = sheet_index
