"""Toast notifications with de-duplication.

A ``Notifier`` is created at application start and handed to whatever needs
to emit user-facing notifications; nothing here is module-level state.
"""

import enum
import logging
import time
from typing import Callable, Optional

from .config import get_settings

logger = logging.getLogger("sistahology.notify")


class ToastLevel(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ToastKey(str, enum.Enum):
    JOURNALS_LOAD_FAILED = "journals_load_failed"
    ENTRIES_LOAD_FAILED = "entries_load_failed"
    AUTH_FAILED = "auth_failed"
    FORM_SUBMIT_FAILED = "form_submit_failed"


ToastCallback = Callable[[str, ToastLevel], None]


class ToastGuard:
    """Suppresses repeats of the same keyed toast within a cooldown window."""

    def __init__(self, cooldown: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self._expiry: dict[str, float] = {}

    def can_show(self, key: str, cooldown: Optional[float] = None) -> bool:
        now = self._clock()
        for stale in [k for k, expiry in self._expiry.items() if now > expiry]:
            del self._expiry[stale]

        if key in self._expiry:
            logger.debug("Blocking duplicate toast %s", key)
            return False

        window = self.cooldown if cooldown is None else cooldown
        self._expiry[key] = now + window
        logger.debug("Allowing toast %s for %.1fs", key, window)
        return True

    def clear(self, key: str) -> None:
        self._expiry.pop(key, None)

    def clear_all(self) -> None:
        self._expiry.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._expiry


class Notifier:
    """
    Delivers toasts to a registered callback.

    Args:
        guard: De-duplication guard for keyed toasts. A fresh one using the
            configured cooldown is created when omitted.
        callback: Receiver of ``(message, level)``. Without one, toasts are
            written to the log.
    """

    def __init__(self, guard: Optional[ToastGuard] = None, callback: Optional[ToastCallback] = None):
        self.guard = guard if guard is not None else ToastGuard(get_settings().toast_cooldown_seconds)
        self._callback = callback
        self.started = False

    def register(self, callback: Optional[ToastCallback]) -> None:
        self._callback = callback

    def show(self, message: str, level: ToastLevel = ToastLevel.INFO, key: Optional[str] = None) -> bool:
        """Emit a toast. Returns False when a keyed toast is still on cooldown."""
        level = ToastLevel(level)
        if isinstance(key, enum.Enum):
            key = key.value
        if key is not None and not self.guard.can_show(key):
            return False
        if self._callback is None:
            logger.info("[%s] %s", level.value.upper(), message)
        else:
            self._callback(message, level)
        return True

    def error(self, message: str, key: Optional[str] = None) -> bool:
        return self.show(message, ToastLevel.ERROR, key)

    def success(self, message: str, key: Optional[str] = None) -> bool:
        return self.show(message, ToastLevel.SUCCESS, key)

    def start(self) -> "Notifier":
        self.started = True
        return self

    def close(self) -> None:
        self._callback = None
        self.guard.clear_all()
        self.started = False

    def __enter__(self) -> "Notifier":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()
