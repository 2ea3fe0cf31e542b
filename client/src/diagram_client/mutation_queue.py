"""Per-key FIFO serialization of async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _settle(marker: "asyncio.Future[None]") -> None:
    if not marker.done():
        marker.set_result(None)


class KeyedMutationQueue:
    """Run operations one at a time per key, in submission order.

    Each key keeps only the marker of its most recently submitted operation.
    A new operation waits for that marker, runs, and settles its own marker
    whether it succeeded or failed, so one failure never blocks or fails
    the operations queued behind it. Keys with nothing pending hold no
    state. Different keys never wait on each other.
    """

    def __init__(self) -> None:
        self._tails: Dict[str, "asyncio.Future[None]"] = {}

    def has_pending(self, key: str) -> bool:
        return key in self._tails

    def clear(self, key: str) -> None:
        """Forget the chain for *key*; the next submission starts fresh."""
        self._tails.pop(key, None)

    async def run(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Wait for earlier operations on *key*, then await ``operation()``."""
        previous = self._tails.get(key)
        marker: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        self._tails[key] = marker

        try:
            if previous is not None:
                logger.debug("Queued operation for %s behind a pending one", key)
                await asyncio.shield(previous)
            return await operation()
        finally:
            if previous is None or previous.done():
                _settle(marker)
            else:
                # Cancelled while waiting: keep the chain ordered.
                previous.add_done_callback(lambda _: _settle(marker))
            if self._tails.get(key) is marker:
                del self._tails[key]
