"""Latch that keeps the expansion pipeline from re-entering itself."""


class ReentrancyGuard:
    """Non-reentrant latch. A second entry while held is refused, not queued.

    Usage::

        if not guard.try_acquire():
            return
        try:
            ...
        finally:
            guard.release()
    """

    def __init__(self):
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        if self._held:
            return False
        self._held = True
        return True

    def release(self) -> None:
        self._held = False
