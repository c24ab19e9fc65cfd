"""Output primitive used by the search pipeline components."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """An ordered list of observers that receive each published value.

    Observers run synchronously, in subscription order, on the caller's
    stack. Exceptions raised by an observer propagate to the publisher.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._observers: list[Callable[[T], None]] = []

    def observe(self, observer: Callable[[T], None]) -> Callable[[], None]:
        """Subscribe ``observer`` and return a callable that unsubscribes it."""
        self._observers.append(observer)

        def dispose() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return dispose

    def send(self, value: T) -> None:
        # Copy so observers may dispose themselves mid-delivery.
        for observer in list(self._observers):
            observer(value)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, observers={len(self._observers)})"


class SkipRepeats(Generic[T]):
    """Forward a value to ``target`` only when it differs from the last one."""

    _UNSET = object()

    def __init__(self, target: Signal[T]) -> None:
        self._target = target
        self._last: object = self._UNSET

    def send(self, value: T) -> None:
        if self._last is not self._UNSET and self._last == value:
            return
        self._last = value
        self._target.send(value)


__all__ = ["Signal", "SkipRepeats"]
