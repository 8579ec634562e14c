#!/usr/bin/env python3
"""Thread-safe value holder with change notification."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[T], None]


class ObservableValue(Generic[T]):
    """Holds the latest value and pushes every new one to its subscribers.

    New subscribers immediately receive the current value.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._lock = threading.Lock()
        # serialises update + delivery; reentrant for listeners that call set()
        self._notify_lock = threading.RLock()
        self._listeners: List[Listener] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._notify_lock:
            with self._lock:
                self._value = value
                listeners = list(self._listeners)
            for listener in listeners:
                self._notify(listener, value)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener, replay the current value to it, return an unsubscribe function."""
        with self._notify_lock:
            with self._lock:
                self._listeners.append(listener)
                current = self._value
            self._notify(listener, current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _notify(listener: Listener, value: T) -> None:
        try:
            listener(value)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Observer {listener!r} failed: {e}")


__all__ = ["ObservableValue"]
