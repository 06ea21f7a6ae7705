"""
Alert capability used by the gateway to surface failures to the user.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def notify(self, title: str, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier for server deployments: alerts go to the log instead of a dialog."""

    def __init__(self, level: int = logging.WARNING):
        self.level = level

    async def notify(self, title: str, message: str) -> None:
        logger.log(self.level, "[%s] %s", title, message)
