"""Minimal observable value and list holders with synchronous notification."""

from __future__ import annotations

from typing import Callable, Generic, Iterable, Iterator, Sequence, TypeVar, overload

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class _Subscribers(Generic[T]):
    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], None]] = []

    def add(self, callback: Callable[[T], None]) -> Unsubscribe:
        self._callbacks.append(callback)

        def _remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _remove

    def notify(self, payload: T) -> None:
        # Copy so callbacks may unsubscribe while being notified.
        for callback in list(self._callbacks):
            callback(payload)


class ObservableValue(Generic[T]):
    """Value holder that notifies subscribers with the new value on change."""

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: _Subscribers[T] = _Subscribers()

    @property
    def value(self) -> T:
        return self._value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self._subscribers.notify(value)

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        return self._subscribers.add(callback)

    def read_only(self) -> ReadOnlyValue[T]:
        return ReadOnlyValue(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class ReadOnlyValue(Generic[T]):
    """Read-only facade over an `ObservableValue`."""

    __slots__ = ("_source",)

    def __init__(self, source: ObservableValue[T]) -> None:
        self._source = source

    @property
    def value(self) -> T:
        return self._source.value

    def get(self) -> T:
        return self._source.value

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        return self._source.subscribe(callback)

    def __repr__(self) -> str:
        return f"ReadOnlyValue({self._source.value!r})"


class ObservableList(Sequence[T]):
    """List whose mutations notify subscribers with the full new contents."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = list(items)
        self._subscribers: _Subscribers[tuple[T, ...]] = _Subscribers()

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def append(self, item: T) -> None:
        self._items.append(item)
        self._changed()

    def extend(self, items: Iterable[T]) -> None:
        new_items = list(items)
        if not new_items:
            return
        self._items.extend(new_items)
        self._changed()

    def clear(self) -> None:
        if not self._items:
            return
        self._items.clear()
        self._changed()

    def replace(self, items: Iterable[T]) -> None:
        new_items = list(items)
        if new_items == self._items:
            return
        self._items = new_items
        self._changed()

    def subscribe(self, callback: Callable[[tuple[T, ...]], None]) -> Unsubscribe:
        return self._subscribers.add(callback)

    def read_only(self) -> ReadOnlyList[T]:
        return ReadOnlyList(self)

    def _changed(self) -> None:
        self._subscribers.notify(tuple(self._items))


class ReadOnlyList(Sequence[T]):
    """Live, read-only view over an `ObservableList`."""

    __slots__ = ("_source",)

    def __init__(self, source: ObservableList[T]) -> None:
        self._source = source

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        return self._source[index]

    def __len__(self) -> int:
        return len(self._source)

    def __iter__(self) -> Iterator[T]:
        return iter(self._source)

    def __repr__(self) -> str:
        return f"ReadOnlyList({list(self._source)!r})"

    def subscribe(self, callback: Callable[[tuple[T, ...]], None]) -> Unsubscribe:
        return self._source.subscribe(callback)
