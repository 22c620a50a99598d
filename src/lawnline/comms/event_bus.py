"""EventBus — thread-safe pub/sub for game events.

The simulation publishes discrete happenings (a defender placed, a wave
starting, a sweeper firing) here so that audio, HUD and WebSocket
collaborators can react without the core ever calling into them.

Each subscriber owns a bounded queue.  A subscriber may pass a topic to
``subscribe()`` to receive only that event type; ``None`` receives all.
"""

from __future__ import annotations

import queue
import threading


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._subscribers: list[tuple[str | None, queue.Queue]] = []

    def subscribe(self, _filter: str | None = None) -> queue.Queue:
        """Subscribe to events. Returns a Queue that receives matching events.

        Messages are dicts of the form ``{"type": ..., "data": ...}``.
        """
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append((_filter, q))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [
                (topic, sub) for topic, sub in self._subscribers if sub is not q
            ]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            for topic, q in self._subscribers:
                if topic is not None and topic != event_type:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Drop oldest message to make room
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass
