"""User notifications raised by list operations."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from homelist.utils.logger import get_logger
from homelist.utils.ui.formatters import format_error, format_success


@runtime_checkable
class Notifier(Protocol):
    """Anything able to show a short titled message to the user."""

    def success(self, title: str, message: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...


class ConsoleNotifier:
    """Notifier printing through the Rich formatters and logging."""

    def __init__(self, quiet_success: bool = False):
        self.quiet_success = quiet_success
        self.logger = get_logger("notifications")

    def success(self, title: str, message: str) -> None:
        self.logger.info("%s: %s", title, message)
        if not self.quiet_success:
            format_success(message)

    def error(self, title: str, message: str) -> None:
        self.logger.warning("%s: %s", title, message)
        format_error(f"{title}: {message}")
