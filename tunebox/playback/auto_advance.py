"""
Auto-advance scheduling.

Debounces the "track finished" condition into a single deferred advance.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Progress fraction treated as "track finished"
DEFAULT_AUTO_ADVANCE_THRESHOLD = 0.999

# Delay before advancing, absorbs rapid progress updates at track end
DEFAULT_AUTO_ADVANCE_DELAY_SECONDS = 0.5


class AutoAdvanceScheduler:
    """
    Cancelable deferred callback.

    Each schedule() or cancel() bumps a generation token. A pending task only
    invokes the callback if the token it captured is still current, so a
    stale advance never fires after the caller has moved on.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        delay: float = DEFAULT_AUTO_ADVANCE_DELAY_SECONDS,
    ):
        self._callback = callback
        self._delay = delay
        self._token = 0
        self._task: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def is_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> bool:
        """
        Arm the callback, replacing any pending one.

        Returns:
            True if armed, False when closed or no event loop is running
        """
        self.cancel()
        if self._closed:
            return False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, auto-advance not scheduled")
            return False

        token = self._token
        self._task = loop.create_task(self._fire_after_delay(token))
        logger.debug(f"Auto-advance scheduled in {self._delay}s (token {token})")
        return True

    def cancel(self) -> None:
        """Invalidate and cancel any pending callback."""
        self._token += 1
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
                logger.debug("Pending auto-advance cancelled")
            self._task = None

    def close(self) -> None:
        """Cancel and refuse further scheduling."""
        self.cancel()
        self._closed = True

    async def _fire_after_delay(self, token: int) -> None:
        await asyncio.sleep(self._delay)

        if token != self._token:
            return

        # Detach before firing so the callback's own state changes
        # do not cancel this task
        self._task = None
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Auto-advance callback error: {e}", exc_info=True)
