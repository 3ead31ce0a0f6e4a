"""
Bounded, closeable in-memory channel connecting pipeline stages.
A fixed capacity gives backpressure: put() blocks while the buffer is full.
"""

import logging
import queue
import threading
from typing import Generic, Iterator, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by get() once a closed channel is drained, and by put() after close()."""


class Channel(Generic[T]):
    def __init__(self, capacity: int, name: str = "channel"):
        if capacity < 1:
            raise ValueError("channel capacity must be at least 1")
        self.name = name
        self.capacity = capacity
        self._q: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._close_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, item: T) -> None:
        if self._closed.is_set():
            raise ChannelClosed(f"{self.name} is closed")
        self._q.put(item)

    def close(self) -> None:
        """
        Mark the end of the stream. Items already buffered are still delivered;
        consumers see ChannelClosed only after draining them. Call once the
        last put() has returned.
        """
        with self._close_lock:
            if self._closed.is_set():
                return
            self._closed.set()
        log.debug("closing %s", self.name)
        self._q.put(_CLOSED)

    def get(self) -> T:
        item = self._q.get()
        if item is _CLOSED:
            # hand the marker on so every other consumer stops too
            self._q.put(_CLOSED)
            raise ChannelClosed(f"{self.name} is closed")
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return
