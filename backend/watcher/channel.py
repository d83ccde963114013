"""
FSPoll Event Channel.

Blocking hand-off between the poll loop and event consumers.
Requires Python 3.11+.
"""

import threading
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

from utils.errors import ChannelClosed

T = TypeVar("T")


class _Handoff(Generic[T]):
    """One queued item and whether a receiver has taken it."""

    __slots__ = ("item", "taken")

    def __init__(self, item: T) -> None:
        self.item = item
        self.taken = False


class EventChannel(Generic[T]):
    """
    Thread-safe channel with rendezvous or bounded-buffer semantics.

    With ``capacity == 0`` every send waits until a receiver has taken the
    item. With ``capacity > 0`` sends wait only while the buffer is full.
    Either way a slow consumer holds back the producer.

    Closing the channel wakes every blocked sender and receiver. Senders
    then get ``False``; a rendezvous item nobody took is withdrawn.
    Buffered items can still be received after close, after which
    receivers get ChannelClosed.
    """

    def __init__(self, capacity: int = 0) -> None:
        """
        Initialize the channel.

        Args:
            capacity: Buffer size, 0 for rendezvous
        """
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")

        self._capacity = capacity
        self._queue: deque[_Handoff[T]] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        """Number of items waiting to be received."""
        with self._cond:
            return len(self._queue)

    def send(self, item: T, timeout: float | None = None) -> bool:
        """
        Send an item, blocking until it is accepted.

        Args:
            item: Item to deliver
            timeout: Seconds to wait, None to wait until accepted or closed

        Returns:
            True if the item was delivered (or buffered), False if the
            channel is closed

        Raises:
            TimeoutError: If the timeout elapsed first
        """
        with self._cond:
            if self._closed:
                return False

            if self._capacity:
                if not self._cond.wait_for(
                    lambda: self._closed or len(self._queue) < self._capacity,
                    timeout,
                ):
                    raise TimeoutError("send timed out waiting for buffer space")
                if self._closed:
                    return False
                self._queue.append(_Handoff(item))
                self._cond.notify_all()
                return True

            handoff = _Handoff(item)
            self._queue.append(handoff)
            self._cond.notify_all()

            if not self._cond.wait_for(
                lambda: handoff.taken or self._closed, timeout
            ):
                self._queue.remove(handoff)
                raise TimeoutError("send timed out waiting for a receiver")
            return handoff.taken

    def receive(self, timeout: float | None = None) -> T:
        """
        Receive the next item.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            The next item

        Raises:
            ChannelClosed: If the channel is closed and drained
            TimeoutError: If the timeout elapsed first
        """
        with self._cond:
            if not self._cond.wait_for(
                lambda: bool(self._queue) or self._closed, timeout
            ):
                raise TimeoutError("receive timed out")
            if not self._queue:
                raise ChannelClosed("event channel is closed")
            handoff = self._queue.popleft()
            handoff.taken = True
            self._cond.notify_all()
            return handoff.item

    def close(self) -> bool:
        """
        Close the channel.

        Returns:
            True if this call closed the channel, False if already closed
        """
        with self._cond:
            if self._closed:
                return False
            self._closed = True
            if not self._capacity:
                # Untaken rendezvous items are withdrawn, not delivered
                self._queue.clear()
            self._cond.notify_all()
            return True

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
