"""
Cooperative cancellation for user-triggered lookups.

A ``CancellationSignal`` is handed to every fetch. Whoever owns the signal can
fire it at any time; a fetch that observes it stops and raises
``RequestCancelledError``. ``CancellationScope`` implements the "new action
cancels the previous one" rule used by interactive front ends.
"""

import asyncio

from pubglookup.core.exceptions import RequestCancelledError


class CancellationSignal:
    """An externally triggerable, one-shot cancellation flag."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Return True once ``cancel()`` has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Fire the signal. Idempotent."""
        self._event.set()

    async def wait(self) -> None:
        """Suspend until the signal fires."""
        await self._event.wait()

    def raise_if_cancelled(self, url: str) -> None:
        """Raise ``RequestCancelledError`` if the signal already fired."""
        if self.cancelled:
            raise RequestCancelledError(url)


class CancellationScope:
    """Hands out one live signal at a time.

    Each call to ``renew()`` cancels the signal issued by the previous call,
    so starting a new search aborts whatever the last one was still waiting on.
    """

    def __init__(self) -> None:
        self._current: CancellationSignal | None = None

    @property
    def current(self) -> CancellationSignal | None:
        return self._current

    def renew(self) -> CancellationSignal:
        """Cancel the current signal (if any) and issue a fresh one."""
        self.cancel()
        self._current = CancellationSignal()
        return self._current

    def cancel(self) -> None:
        """Cancel the current signal without issuing a new one."""
        if self._current is not None:
            self._current.cancel()
