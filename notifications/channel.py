import logging
import threading
import time
from typing import Callable, Optional

from pydantic import BaseModel, Field

from config import NOTIFICATION_TIMEOUT
from state.session_state import Severity

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    message: str
    severity: Severity
    created_at: float = Field(default_factory=time.monotonic)


class NotificationChannel:
    """
    Holds at most one visible notification.

    `publish` replaces whatever is showing and restarts the dismiss window;
    `dismiss` clears it and cancels the pending timer. A timer that fires for a
    notification that has already been replaced does nothing.
    """

    def __init__(self, timeout: float = NOTIFICATION_TIMEOUT,
                 timer_factory: Callable[..., threading.Timer] = threading.Timer):
        self.timeout = timeout
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._current: Optional[Notification] = None
        self._timer = None

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def publish(self, message: str, severity: Severity = Severity.INFO) -> Notification:
        notification = Notification(message=message, severity=Severity(severity))
        with self._lock:
            self._cancel_timer()
            self._current = notification
            timer = self._timer_factory(self.timeout, self._expire, args=(notification,))
            timer.daemon = True
            self._timer = timer
            timer.start()
        log = logger.error if notification.severity == Severity.ERROR else logger.info
        log(f"Notification ({notification.severity.value}): {message}")
        return notification

    def dismiss(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._current = None

    def _expire(self, notification: Notification) -> None:
        with self._lock:
            if self._current is not notification:
                return
            self._current = None
            self._timer = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
