"""
Non-blocking user notifications (toast equivalents) raised by the reader.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel

from herstories.core.errors import HerStoriesError

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    title: str
    description: str = ""
    error_kind: str | None = None
    url: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_error(cls, error: HerStoriesError) -> "Notification":
        return cls(
            level=NotificationLevel.ERROR,
            title=error.title,
            description=str(error),
            error_kind=error.kind.value,
        )


class Notifier(ABC):
    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Must not block or raise."""
        pass


class LoggingNotifier(Notifier):
    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.level == NotificationLevel.ERROR else logging.INFO
        logger.log(
            level,
            "reader_notification",
            extra={
                "level_name": notification.level.value,
                "title": notification.title,
                "error_kind": notification.error_kind,
            },
        )
