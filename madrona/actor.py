"""Actors: objects that handle messages from their own queue on a timer."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Iterable

from madrona.path import Path

DEFAULT_QUEUE_SIZE = 128
DEFAULT_INTERVAL_MS = 1000 // 60


class _BoundedQueue:
    """A thread-safe FIFO that refuses pushes when full."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._items: deque[Any] = deque()
        self._lock = threading.Lock()

    def push(self, item: Any) -> bool:
        with self._lock:
            if len(self._items) >= self._capacity:
                return False
            self._items.append(item)
            return True

    def pop_all(self) -> Iterable[Any]:
        while True:
            with self._lock:
                if not self._items:
                    return
                item = self._items.popleft()
            yield item

    def resize(self, capacity: int) -> None:
        with self._lock:
            self._capacity = capacity
            while len(self._items) > capacity:
                self._items.pop()

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class _RepeatingTimer:
    """Calls a function repeatedly on a background thread."""

    def __init__(self) -> None:
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    def start(self, fn: Callable[[], None], interval_s: float) -> None:
        self.stop()
        stop = threading.Event()

        def run() -> None:
            while not stop.wait(interval_s):
                fn()

        self._stop = stop
        self._thread = threading.Thread(target=run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()


class Actor(ABC):
    """Handles incoming messages using its own queue and timer."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue = _BoundedQueue(queue_size)
        self._timer = _RepeatingTimer()
        self.dropped_messages = 0

    def messages_available(self) -> int:
        return len(self._queue)

    def resize_queue(self, n: int) -> None:
        self._queue.resize(n)

    def on_full_queue(self) -> None:
        """Called when a message arrives and the queue is full.

        The message is dropped; by default the drop is counted in
        ``dropped_messages``. Subclasses may override to act otherwise.
        """
        self.dropped_messages += 1

    @abstractmethod
    def on_message(self, message: Any) -> None:
        """Handle one message."""

    def start(self, interval: int = DEFAULT_INTERVAL_MS) -> None:
        """Handle queued messages every ``interval`` milliseconds."""
        self._timer.start(self.handle_messages_in_queue, interval / 1000.0)

    def stop(self) -> None:
        self._timer.stop()

    def enqueue_message(self, message: Any) -> None:
        if not self._queue.push(message):
            self.on_full_queue()

    def enqueue_message_list(self, messages: Iterable[Any]) -> None:
        for message in messages:
            self.enqueue_message(message)

    def handle_messages_in_queue(self) -> None:
        for message in self._queue.pop_all():
            self.on_message(message)

    def clear_message_queue(self) -> None:
        self._queue.clear()


class ActorRegistry:
    """Actors registered by name."""

    def __init__(self) -> None:
        self._actors: dict[Path, Actor] = {}
        self._lock = threading.Lock()

    def get_actor(self, name: Path | str) -> Actor | None:
        with self._lock:
            return self._actors.get(Path(name))

    def register(self, name: Path | str, actor: Actor) -> None:
        with self._lock:
            self._actors[Path(name)] = actor

    def remove(self, actor: Actor) -> None:
        """Remove every registration of ``actor``."""
        with self._lock:
            for name in [n for n, a in self._actors.items() if a is actor]:
                del self._actors[name]


_registry = ActorRegistry()


def register_actor(name: Path | str, actor: Actor) -> None:
    _registry.register(name, actor)


def remove_actor(actor: Actor) -> None:
    _registry.remove(actor)


def send_message_to_actor(name: Path | str, message: Any) -> None:
    """Queue a message for the named actor, if it exists."""
    actor = _registry.get_actor(name)
    if actor is not None:
        actor.enqueue_message(message)