from __future__ import annotations

import copy as _copy
from typing import Any, Generic, Iterable, Iterator, Optional, Sequence, Tuple, TypeVar, Union

from .allocator import Allocator
from .entry import OccupiedEntry, VacantEntry
from .iter import Drain, IntoIter, IntoKeys, IntoValues, Iter, IterMut, Keys, Values, ValuesMut
from .store import DynamicArray, ValueRef

K = TypeVar("K")
V = TypeVar("V")
D = TypeVar("D")


class AssocList(Generic[K, V]):
    """An associated list: a map on top of a growable array of ``(key, value)`` pairs.

    Every operation relies on nothing but ``==`` between keys, so most of them
    are O(n) linear scans. Prefer ``dict`` whenever keys are hashable; an
    AssocList is the fallback for keys that are not (floats compared with a
    tolerance, mutable records, objects with only ``__eq__``).

    Implementation notes
    --------------------
    • No two stored pairs have equal keys; every public operation keeps it so.
    • Lookups scan front to back and compare ``stored_key == query`` with no
      identity shortcut. A key that is not equal to itself (``float("nan")``)
      can be inserted but never found, replaced or removed again.
    • Removal is swap-removal: the last pair moves into the hole, so the
      order of the remaining pairs changes after a removal.
    • Entries, value references and borrowing iterators detect a change of
      shape made behind their back and raise ``BorrowError``.
    """

    __slots__ = ("_store",)

    def __init__(
        self,
        it: Optional[Iterable[Tuple[K, V]]] = None,
        *,
        capacity: int = 0,
        allocator: Optional[Allocator] = None,
    ) -> None:
        self._store: DynamicArray[Tuple[K, V]] = DynamicArray(capacity, allocator)
        if it is not None:
            self.extend(it)

    # ------------------------------ construction -----------------------------

    @classmethod
    def new(cls) -> AssocList[K, V]:
        return cls()

    @classmethod
    def with_capacity(cls, capacity: int) -> AssocList[K, V]:
        """An empty list with room for at least `capacity` pairs."""
        return cls(capacity=capacity)

    @classmethod
    def new_in(cls, allocator: Allocator) -> AssocList[K, V]:
        """An empty list whose buffers come from `allocator`. Allocates nothing yet."""
        return cls(allocator=allocator)

    @classmethod
    def with_capacity_in(cls, capacity: int, allocator: Allocator) -> AssocList[K, V]:
        return cls(capacity=capacity, allocator=allocator)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[K, V]]) -> AssocList[K, V]:
        """Build from a sized sequence of pairs; a repeated key keeps its last value."""
        out: AssocList[K, V] = cls.with_capacity(len(pairs))
        for key, value in pairs:
            out.insert(key, value)
        return out

    def copy(self) -> AssocList[K, V]:
        """Shallow copy, using the same allocator."""
        out: AssocList[K, V] = type(self).__new__(type(self))
        out._store = self._store.copy()
        return out

    __copy__ = copy

    # ------------------------------ internals --------------------------------

    def _find(self, key: Any) -> int:
        """Index of the pair whose key equals `key`, or -1."""
        store = self._store
        for i in range(len(store)):
            if store[i][0] == key:
                return i
        return -1

    # ------------------------------ capacity ---------------------------------

    def len(self) -> int:
        return len(self._store)

    def is_empty(self) -> bool:
        return len(self._store) == 0

    def capacity(self) -> int:
        return self._store.capacity

    def allocator(self) -> Allocator:
        return self._store.allocator

    def reserve(self, additional: int) -> None:
        """Reserve room for at least `additional` more pairs.

        Raises:
            OverflowError: if the capacity would exceed ``MAX_CAPACITY``.
            MemoryError: if the allocator cannot provide the buffer.
        """
        self._store.reserve(additional)

    def reserve_exact(self, additional: int) -> None:
        self._store.reserve_exact(additional)

    def try_reserve(self, additional: int) -> None:
        """Like :meth:`reserve`, but failure raises ``TryReserveError`` and leaves
        the list untouched."""
        self._store.try_reserve(additional)

    def try_reserve_exact(self, additional: int) -> None:
        self._store.try_reserve_exact(additional)

    def shrink_to(self, min_capacity: int) -> None:
        self._store.shrink_to(min_capacity)

    def shrink_to_fit(self) -> None:
        self._store.shrink_to_fit()

    # -------------------------------- lookup ---------------------------------

    def get(self, key: Any, default: Optional[D] = None) -> Union[V, D, None]:
        """Return the value for `key`, or `default` if there is none."""
        i = self._find(key)
        return default if i < 0 else self._store[i][1]

    def get_key_value(self, key: Any) -> Optional[Tuple[K, V]]:
        """Return the stored ``(key, value)`` pair for `key`, or None."""
        i = self._find(key)
        return None if i < 0 else self._store[i]

    def contains_key(self, key: Any) -> bool:
        return self._find(key) >= 0

    def get_mut(self, key: Any) -> Optional[ValueRef[K, V]]:
        """Return a reference through which the value for `key` can be replaced."""
        i = self._find(key)
        return None if i < 0 else ValueRef(self._store, i)

    # ------------------------------- mutation --------------------------------

    def insert(self, key: K, value: V) -> Optional[V]:
        """Associate `value` with `key`.

        If the key is already present its value is replaced in place and the
        previous value returned; otherwise the pair is appended and None
        returned.
        """
        i = self._find(key)
        if i >= 0:
            stored_key, previous = self._store[i]
            self._store[i] = (stored_key, value)
            return previous
        self._store.push((key, value))
        return None

    def remove_entry(self, key: Any) -> Optional[Tuple[K, V]]:
        """Remove the pair for `key` and return it, or None if absent."""
        i = self._find(key)
        return None if i < 0 else self._store.swap_remove(i)

    def remove(self, key: Any, default: Optional[D] = None) -> Union[V, D, None]:
        """Remove the pair for `key` and return its value, or `default` if absent."""
        pair = self.remove_entry(key)
        return default if pair is None else pair[1]

    def clear(self) -> None:
        self._store.clear()

    def entry(self, key: K) -> Union[OccupiedEntry[K, V], VacantEntry[K, V]]:
        """Scan once for `key` and return a view to act on the result."""
        i = self._find(key)
        if i >= 0:
            return OccupiedEntry(self._store, key, i)
        return VacantEntry(self._store, key)

    def extend(self, it: Iterable[Tuple[K, V]]) -> None:
        """Insert every pair of `it` left to right; later duplicates win.

        Accepts a mapping (anything with ``items()``) or an iterable of pairs.
        """
        if hasattr(it, "items"):
            it = it.items()  # type: ignore[attr-defined]
        for key, value in it:
            self.insert(key, value)

    def extend_cloned(self, it: Iterable[Tuple[K, V]]) -> None:
        """Like :meth:`extend`, inserting shallow copies of keys and values."""
        if hasattr(it, "items"):
            it = it.items()  # type: ignore[attr-defined]
        for key, value in it:
            self.insert(_copy.copy(key), _copy.copy(value))

    # ------------------------------- iteration -------------------------------

    def iter(self) -> Iter[K, V]:
        return Iter(self._store)

    def items(self) -> Iter[K, V]:
        """Same as :meth:`iter`; lets another AssocList be passed where a mapping is accepted."""
        return Iter(self._store)

    def iter_mut(self) -> IterMut[K, V]:
        return IterMut(self._store)

    def keys(self) -> Keys[K, V]:
        return Keys(self._store)

    def values(self) -> Values[K, V]:
        return Values(self._store)

    def values_mut(self) -> ValuesMut[K, V]:
        return ValuesMut(self._store)

    def into_iter(self) -> IntoIter[K, V]:
        """Move all pairs into the returned iterator, leaving this list empty."""
        return IntoIter(self._store)

    def into_keys(self) -> IntoKeys[K, V]:
        return IntoKeys(self._store)

    def into_values(self) -> IntoValues[K, V]:
        return IntoValues(self._store)

    def drain(self) -> Drain[K, V]:
        """Remove every pair, yielding them. The list is empty afterwards in all
        cases and keeps its capacity."""
        return Drain(self._store)

    # ---------------------------- magic methods ------------------------------

    def __len__(self) -> int:
        return len(self._store)

    def __bool__(self) -> bool:
        return len(self._store) != 0

    def __contains__(self, key: Any) -> bool:
        return self._find(key) >= 0

    def __iter__(self) -> Iterator[K]:
        # Keys, like dict
        return self.keys()

    def __getitem__(self, key: Any) -> V:
        i = self._find(key)
        if i < 0:
            raise KeyError(key)
        return self._store[i][1]

    def __setitem__(self, key: K, value: V) -> None:
        self.insert(key, value)

    def __delitem__(self, key: Any) -> None:
        if self.remove_entry(key) is None:
            raise KeyError(key)

    def __eq__(self, other: object) -> bool:
        """Same length and every key of `self` maps to an equal value in `other`.

        Keys are unique on both sides, so checking one direction is enough.
        """
        if not isinstance(other, AssocList):
            return NotImplemented
        if len(self) != len(other):
            return False
        for key, value in self._store:
            i = other._find(key)
            if i < 0 or not other._store[i][1] == value:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def to_py(self) -> list[tuple[K, Any]]:
        """Convert to a plain list of pairs; values use their own ``to_py`` when present."""
        out: list[tuple[K, Any]] = []
        for k, v in self._store:
            if hasattr(v, "to_py") and callable(getattr(v, "to_py")):
                out.append((k, v.to_py()))
            else:
                out.append((k, v))
        return out

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"AssocList({self.to_py()!r})"


def assoc_list(*pairs: Tuple[K, V]) -> AssocList[K, V]:
    """Literal-style constructor: ``assoc_list((1.5, "a"), (2.5, "b"))``.

    A repeated key keeps the value of its last occurrence.
    """
    return AssocList.from_pairs(pairs)
