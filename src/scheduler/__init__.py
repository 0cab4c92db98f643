"""
Scheduling of periodic label-unsubscribe runs.
"""

from .triggers import TriggerScheduler

__all__ = ['TriggerScheduler']
