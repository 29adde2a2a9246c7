"""Event delivery from the engine to consumers.

Two delivery modes, both in emission order:

* ``subscribe(callback)``: synchronous dispatch on the engine's thread.
  A failing callback is logged and does not affect other subscribers.
* ``open_queue(loop)``: an ``asyncio.Queue`` owned by *loop*. Events are
  handed over with ``loop.call_soon_threadsafe``, so the engine may run
  in an executor thread while consumers await on the event loop.

Example:
    >>> bus = EventBus()
    >>> bus.subscribe(lambda event: print(event.type))
    >>> queue = bus.open_queue(asyncio.get_running_loop())
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, List, Tuple

from models.events import EngineEvent

# Configure logging
logger = logging.getLogger(__name__)

EventCallback = Callable[[EngineEvent], None]
DEFAULT_QUEUE_SIZE = 256


class EventBus:
    """Observer registry plus thread-safe queue fan-out."""

    def __init__(self) -> None:
        self._callbacks: List[EventCallback] = []
        self._queues: List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a synchronous callback.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def open_queue(
        self,
        loop: asyncio.AbstractEventLoop,
        maxsize: int = DEFAULT_QUEUE_SIZE,
    ) -> asyncio.Queue:
        """Create a queue receiving every future event on *loop*.

        When the consumer falls behind and the queue is full, new events
        for that queue are dropped and logged.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        with self._lock:
            self._queues.append((loop, queue))
        return queue

    def close_queue(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._queues = [(loop, q) for loop, q in self._queues if q is not queue]

    def emit(self, event: EngineEvent) -> None:
        """Deliver *event* to all subscribers and queues."""
        with self._lock:
            callbacks = list(self._callbacks)
            queues = list(self._queues)

        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Error in {event.type} subscriber: {e}",
                    extra={"component": "events"},
                )

        for loop, queue in queues:
            try:
                loop.call_soon_threadsafe(self._put, queue, event)
            except RuntimeError:
                # Consumer loop is closed.
                self.close_queue(queue)

    @staticmethod
    def _put(queue: asyncio.Queue, event: EngineEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                f"Event queue full, dropping {event.type}",
                extra={"component": "events"},
            )

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks) + len(self._queues)
