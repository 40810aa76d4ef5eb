"""A value holder that persists itself after every mutable borrow."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class _MutRef(Generic[T]):
    value: T


class AutoSaver(Generic[T]):
    """Hold a value and call ``saver`` on it whenever a borrow ends."""

    def __init__(self, value: T, saver: Callable[[T], None]) -> None:
        self._value = value
        self._saver = saver

    @property
    def value(self) -> T:
        return self._value

    @contextmanager
    def borrow_mut(self) -> Iterator[_MutRef[T]]:
        """Yield a reference whose ``value`` may be changed or replaced.

        The saver runs when the block exits, even if it raised.
        """
        ref = _MutRef(self._value)
        try:
            yield ref
        finally:
            self._value = ref.value
            self._saver(self._value)