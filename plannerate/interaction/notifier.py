from dataclasses import dataclass
from typing import Callable, Optional
import time

from ..utils.constants import NOTIFICATION_DURATION_SECONDS
from ..utils.logger import get_logger

LEVELS = ('info', 'success', 'warning', 'error')

@dataclass
class Notification:
    message: str
    level: str
    expires_at: float

class Notifier:
    """Transient user notifications (toasts)"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.logger = get_logger()
        self._current: Optional[Notification] = None

    def show(self, message: str, level: str = 'info', duration: float = NOTIFICATION_DURATION_SECONDS) -> Notification:
        if level not in LEVELS:
            raise ValueError(f"Unknown notification level: {level}")
        self._current = Notification(message=message, level=level, expires_at=self.clock() + duration)
        self.logger.debug(f"Notification ({level}): {message}")
        return self._current

    @property
    def current(self) -> Optional[Notification]:
        """The visible notification, if it has not expired"""
        if self._current is not None and self.clock() >= self._current.expires_at:
            self._current = None
        return self._current

    def close(self):
        self._current = None
