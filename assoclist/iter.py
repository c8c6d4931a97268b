"""Iterators over an :class:`~assoclist.AssocList`.

Borrowing iterators (``Iter``, ``Keys``, ``Values``, ``IterMut``,
``ValuesMut``) walk the live store and raise
:class:`~assoclist.errors.BorrowError` if the list changes shape before they
are exhausted. The mutable ones yield :class:`~assoclist.store.ValueRef`
handles, so values can be replaced in place while iterating.

Owning iterators (``IntoIter``, ``IntoKeys``, ``IntoValues``, ``Drain``) move
every element out of the list when they are created; the list is empty from
then on. The ``into_*`` iterators take the buffer along; ``Drain`` leaves it
behind, so the list keeps its capacity. Elements that are never consumed
are dropped when the iterator is closed, leaves a ``with`` block or is
garbage collected.

All of them are single pass: once exhausted they stay exhausted.
"""

from __future__ import annotations

from typing import Any, Generic, Iterator, Optional, Tuple, TypeVar

from .store import DynamicArray, ValueRef

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class _BorrowingIter(Generic[K, V, T]):
    __slots__ = ("_store", "_stamp", "_pos")

    def __init__(self, store: DynamicArray[Tuple[K, V]]) -> None:
        self._store: Optional[DynamicArray[Tuple[K, V]]] = store
        self._stamp = store.stamp
        self._pos = 0

    def _project(self, store: DynamicArray[Tuple[K, V]], idx: int) -> T:
        raise NotImplementedError

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        store = self._store
        if store is None:
            raise StopIteration
        store.check(self._stamp)
        if self._pos >= len(store):
            self._store = None
            raise StopIteration
        idx = self._pos
        self._pos += 1
        return self._project(store, idx)

    def __length_hint__(self) -> int:
        if self._store is None:
            return 0
        return max(len(self._store) - self._pos, 0)


class Iter(_BorrowingIter[K, V, Tuple[K, V]]):
    """``(key, value)`` pairs, created by ``AssocList.iter``."""

    __slots__ = ()

    def _project(self, store, idx):
        return store[idx]


class Keys(_BorrowingIter[K, V, K]):
    __slots__ = ()

    def _project(self, store, idx):
        return store[idx][0]


class Values(_BorrowingIter[K, V, V]):
    __slots__ = ()

    def _project(self, store, idx):
        return store[idx][1]


class IterMut(_BorrowingIter[K, V, Tuple[K, ValueRef[K, V]]]):
    """``(key, ValueRef)`` pairs, created by ``AssocList.iter_mut``."""

    __slots__ = ()

    def _project(self, store, idx):
        return store[idx][0], ValueRef(store, idx)


class ValuesMut(_BorrowingIter[K, V, ValueRef[K, V]]):
    __slots__ = ()

    def _project(self, store, idx):
        return ValueRef(store, idx)


class _OwningIter(Generic[K, V, T]):
    __slots__ = ("_store", "_pos")

    def __init__(self, store: DynamicArray[Tuple[K, V]]) -> None:
        # Detach everything up front; the caller's list is empty from here on.
        self._store: Optional[Any] = self._detach(store)
        self._pos = 0

    def _detach(self, store: DynamicArray[Tuple[K, V]]) -> Any:
        return store.take()

    def _discard(self, detached: Any) -> None:
        detached.release()

    def _project(self, pair: Tuple[K, V]) -> T:
        raise NotImplementedError

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        store = self._store
        if store is None or self._pos >= len(store):
            self.close()
            raise StopIteration
        pair = store[self._pos]
        # The slot is ours alone; drop the reference as the element goes out.
        store[self._pos] = None
        self._pos += 1
        return self._project(pair)

    def __length_hint__(self) -> int:
        if self._store is None:
            return 0
        return len(self._store) - self._pos

    def close(self) -> None:
        """Discard every element not yet yielded."""
        if self._store is not None:
            self._discard(self._store)
            self._store = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()


class IntoIter(_OwningIter[K, V, Tuple[K, V]]):
    """Consuming iterator over ``(key, value)`` pairs."""

    __slots__ = ()

    def _project(self, pair):
        return pair


class IntoKeys(_OwningIter[K, V, K]):
    __slots__ = ()

    def _project(self, pair):
        return pair[0]


class IntoValues(_OwningIter[K, V, V]):
    __slots__ = ()

    def _project(self, pair):
        return pair[1]


class Drain(_OwningIter[K, V, Tuple[K, V]]):
    """Removes and yields every ``(key, value)`` pair of the list.

    The list is already empty while draining and keeps its capacity. It
    stays empty whether or not the drain is run to completion::

        with assoc.drain() as pairs:
            for key, value in pairs:
                ...
    """

    __slots__ = ()

    def _project(self, pair):
        return pair

    def _detach(self, store):
        # Only the elements move out; the list keeps its buffer for refilling.
        return store.drain()

    def _discard(self, detached):
        detached.clear()
