"""Single-slot handoff between the callback listener and the login flow."""

from __future__ import annotations

import queue
import threading

from workers_login.auth.outcome import CallbackOutcome
from workers_login.exceptions import CallbackTimeoutError


class ResultChannel:
    """Carries the first classified callback outcome to the waiting login flow.

    The listener thread calls :meth:`send`; only the first value is kept and
    later ones are dropped. The login flow calls :meth:`receive` once, with a
    timeout.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[CallbackOutcome] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._sent = False

    @property
    def sent(self) -> bool:
        """Whether an outcome has been accepted."""
        return self._sent

    def send(self, outcome: CallbackOutcome) -> bool:
        """Offer *outcome*; return ``True`` if it was the one accepted."""
        with self._lock:
            if self._sent:
                return False
            self._sent = True
            self._queue.put_nowait(outcome)
            return True

    def receive(self, timeout: float) -> CallbackOutcome:
        """Block until the outcome arrives or *timeout* seconds pass.

        Raises:
            CallbackTimeoutError: If nothing arrived in time.
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            raise CallbackTimeoutError(timeout) from None
