"""Join counter for multi-request loads."""
from typing import Callable

from utils.logger import get_logger

logger = get_logger(__name__)


class LoadBarrier:
    """
    Counts outstanding requests of one load and fires a callback once.

    Each issued request is announced with `expect()` and resolved with
    `complete()`, on success and on failure alike. `on_complete` runs the
    first time the pending count drops to zero and never again.
    """

    def __init__(self, on_complete: Callable[[], None]):
        self.on_complete = on_complete
        self.pending = 0
        self.fired = False

    def expect(self, n: int = 1) -> None:
        """Announce `n` more outstanding requests."""
        if self.fired:
            raise RuntimeError("Cannot expect more requests after the load has completed")
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        self.pending += n

    def complete(self) -> None:
        """Resolve one outstanding request."""
        if self.pending <= 0:
            raise RuntimeError("complete() called with no pending requests")
        self.pending -= 1
        logger.debug(f"Load request resolved, {self.pending} pending")
        if self.pending == 0:
            self.fired = True
            self.on_complete()
