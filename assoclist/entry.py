"""Entry API of an :class:`~assoclist.AssocList`.

``AssocList.entry(key)`` scans the list once and returns either an
:class:`OccupiedEntry` (the key is present, its position is remembered) or a
:class:`VacantEntry` (the key is absent). Both operate on the remembered
state without scanning again.

An entry is only valid until the list changes shape. Using it after an
insertion of a new key, a removal, a clear or a drain made elsewhere raises
:class:`~assoclist.errors.BorrowError`. The consuming operations of an entry
(``remove``, ``remove_entry`` and ``VacantEntry.insert``) spend it the same way.
"""

from __future__ import annotations

from typing import Callable, Generic, Tuple, TypeVar

from .store import DynamicArray, ValueRef

K = TypeVar("K")
V = TypeVar("V")


class Entry(Generic[K, V]):
    """A view into a single slot of an AssocList, either occupied or vacant.

    Abstract: only :class:`OccupiedEntry` and :class:`VacantEntry` are ever
    handed out. Subclasses implement :meth:`or_insert_with`; the rest of the
    shared API is written in terms of it.
    """

    __slots__ = ("_store", "_stamp", "_key")

    def __init__(self, store: DynamicArray[Tuple[K, V]], key: K) -> None:
        self._store = store
        self._stamp = store.stamp
        self._key = key

    def key(self) -> K:
        """Return the key used to create the entry."""
        return self._key

    def or_insert(self, default: V) -> ValueRef[K, V]:
        """Ensure a value is present, inserting `default` if vacant.

        Returns a reference to the value in the entry.
        """
        return self.or_insert_with(lambda: default)

    def or_insert_with(self, factory: Callable[[], V]) -> ValueRef[K, V]:
        """Like :meth:`or_insert`, but only build the default when needed.

        Implemented by each concrete entry kind.
        """
        raise NotImplementedError

    def and_modify(self, func: Callable[[V], V]) -> Entry[K, V]:
        """Replace an occupied value with ``func(value)``; no-op when vacant."""
        return self


class OccupiedEntry(Entry[K, V]):
    """The list holds a value for :meth:`key`, at a remembered position."""

    __slots__ = ("_index",)

    def __init__(self, store: DynamicArray[Tuple[K, V]], key: K, index: int) -> None:
        super().__init__(store, key)
        self._index = index

    def _check(self) -> None:
        self._store.check(self._stamp)
        if not 0 <= self._index < len(self._store):
            # Only reachable if the stamp protocol itself is broken.
            raise IndexError("entry index out of bounds")

    def get(self) -> V:
        self._check()
        return self._store[self._index][1]

    def get_mut(self) -> ValueRef[K, V]:
        self._check()
        return ValueRef(self._store, self._index)

    def insert(self, value: V) -> V:
        """Replace the value, returning the previous one. The entry stays usable."""
        self._check()
        key, old = self._store[self._index]
        self._store[self._index] = (key, value)
        return old

    def remove_entry(self) -> Tuple[K, V]:
        """Remove the pair from the list (swap-removal) and return it."""
        self._check()
        return self._store.swap_remove(self._index)

    def remove(self) -> V:
        return self.remove_entry()[1]

    def or_insert_with(self, factory: Callable[[], V]) -> ValueRef[K, V]:
        return self.get_mut()

    def and_modify(self, func: Callable[[V], V]) -> Entry[K, V]:
        self.insert(func(self.get()))
        return self

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"OccupiedEntry(key={self._key!r}, index={self._index})"


class VacantEntry(Entry[K, V]):
    """The list holds no value for :meth:`key`."""

    __slots__ = ()

    def into_key(self) -> K:
        """Give the key back without inserting anything."""
        return self._key

    def insert(self, value: V) -> ValueRef[K, V]:
        """Append ``(key, value)`` and return a reference to the stored value.

        Only this one push happens between the lookup and now, so the new pair
        is the last element of the list.
        """
        self._store.check(self._stamp)
        self._store.push((self._key, value))
        return ValueRef(self._store, len(self._store) - 1)

    def or_insert_with(self, factory: Callable[[], V]) -> ValueRef[K, V]:
        return self.insert(factory())

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"VacantEntry(key={self._key!r})"
