"""
Recurring trigger management on top of the schedule library.

Handlers are registered by name; a trigger is a schedule job tagged with
its handler's name, which is how an existing trigger is recognised.
"""

import time
from typing import Callable, Dict, Optional

import schedule

from src.unsubscribe.exceptions import ConfigurationError
from src.unsubscribe.logging import UnsubscribeLogger


class TriggerScheduler:
    """Installs and drives recurring triggers for named handlers."""

    def __init__(self, handlers: Optional[Dict[str, Callable[[], object]]] = None,
                 scheduler: Optional[schedule.Scheduler] = None):
        self.handlers: Dict[str, Callable[[], object]] = dict(handlers or {})
        self.scheduler = scheduler or schedule.Scheduler()
        self.logger = UnsubscribeLogger("scheduler")

    def register_handler(self, name: str, handler: Callable[[], object]):
        self.handlers[name] = handler

    def ensure_recurring_trigger(self, handler_name: str, interval_minutes: int) -> schedule.Job:
        """
        Make sure handler_name runs every interval_minutes.

        Idempotent: if a trigger for the handler already exists it is returned
        unchanged and no second trigger is created.

        Raises:
            ConfigurationError: unknown handler or non-positive interval
        """
        if handler_name not in self.handlers:
            raise ConfigurationError(f"Unknown trigger handler: {handler_name}",
                                     {"available": ", ".join(sorted(self.handlers))})
        if interval_minutes <= 0:
            raise ConfigurationError("Trigger interval must be positive",
                                     {"interval_minutes": interval_minutes})

        existing = self.scheduler.get_jobs(handler_name)
        if existing:
            self.logger.info("Trigger already installed", {"handler": handler_name})
            return existing[0]

        job = self.scheduler.every(interval_minutes).minutes.do(
            self.run_handler, handler_name
        ).tag(handler_name)
        self.logger.info("Trigger installed", {
            "handler": handler_name,
            "interval_minutes": interval_minutes
        })
        return job

    def triggers_for(self, handler_name: str):
        return self.scheduler.get_jobs(handler_name)

    def remove_trigger(self, handler_name: str):
        self.scheduler.clear(handler_name)

    def run_handler(self, handler_name: str):
        """Invoke a handler now. Errors are logged; a failed run is retried at the next tick."""
        try:
            self.handlers[handler_name]()
        except Exception as e:
            self.logger.log_exception(e, {"handler": handler_name})

    def run_pending(self):
        self.scheduler.run_pending()

    def run_forever(self, poll_seconds: float = 1.0, max_iterations: Optional[int] = None,
                    sleep: Callable[[float], None] = time.sleep):
        """
        Run due triggers until interrupted.

        Args:
            poll_seconds: Delay between checks for due triggers
            max_iterations: Stop after this many checks (None runs forever)
            sleep: Sleep function
        """
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self.run_pending()
            iterations += 1
            sleep(poll_seconds)
