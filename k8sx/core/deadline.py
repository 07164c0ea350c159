import threading
import time
from typing import Optional


class Deadline:
    """Budget de temps global partagé par tous les appels d'une recherche.

    Combine une échéance (horloge monotone) et un signal d'annulation que les
    workers consultent avant chaque scope.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout if timeout else None
        self._cancelled = threading.Event()

    def remaining(self) -> Optional[float]:
        """Secondes restantes, None si pas de limite"""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def expired(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def request_timeout(self) -> Optional[float]:
        """Valeur à passer en _request_timeout au client kubernetes"""
        remaining = self.remaining()
        if remaining is None:
            return None
        # urllib3 refuse un timeout nul
        return max(remaining, 0.001)
