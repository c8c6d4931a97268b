from __future__ import annotations

import ctypes
import logging
import sys
from typing import Any, Generic, Iterator, Optional, Tuple, TypeVar

from .allocator import GLOBAL, Allocator
from .errors import BorrowError, TryReserveError, TryReserveErrorKind

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

logger = logging.getLogger(__name__)

# Largest number of slots a single buffer may address.
MAX_CAPACITY = sys.maxsize // ctypes.sizeof(ctypes.py_object)


class DynamicArray(Generic[T]):
    """A contiguous growable array, the backing store of an AssocList.

    Implementation notes
    --------------------
    • Storage is a ctypes array of `py_object` handed out by an Allocator.
    • Capacity grows geometrically (x2) when full and never shrinks by itself;
      `shrink_to` / `shrink_to_fit` release memory explicitly.
    • An empty array with zero capacity owns no buffer at all.
    • `swap_remove` is O(1) and fills the hole with the last element.
    • `stamp` counts structural changes (push, swap_remove, clear, take).
      Views into the array remember it and call `check` before touching a
      slot, so a stale index is reported instead of silently reused.
    """

    __slots__ = ("_buf", "_size", "_capacity", "_alloc", "_stamp")

    # Smallest capacity chosen when growing from nothing.
    _MIN_NON_ZERO_CAPACITY = 4
    _GROWTH_FACTOR = 2

    def __init__(self, capacity: int = 0, allocator: Optional[Allocator] = None) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._alloc: Allocator = allocator if allocator is not None else GLOBAL
        self._buf: Any = None
        self._capacity = 0
        self._size = 0
        self._stamp = 0
        if capacity > 0:
            self._resize(capacity)

    # ------------------------------- internals -------------------------------

    def _resize(self, new_capacity: int) -> None:
        """Move the live elements into a buffer of exactly `new_capacity` slots.

        The new buffer is obtained before the old one is touched, so a failing
        allocation leaves the array unchanged.
        """
        if new_capacity < self._size:
            raise ValueError("new capacity must be >= size")
        if new_capacity > MAX_CAPACITY:
            raise OverflowError("capacity overflow")

        new_buf = self._alloc.allocate(new_capacity) if new_capacity > 0 else None
        for i in range(self._size):
            new_buf[i] = self._buf[i]

        if self._buf is not None:
            self._alloc.deallocate(self._buf, self._capacity)
        logger.debug("resized buffer %d -> %d slots", self._capacity, new_capacity)
        self._buf = new_buf
        self._capacity = new_capacity

    def _required(self, additional: int) -> int:
        if additional < 0:
            raise ValueError("additional must be >= 0")
        required = self._size + additional
        if required > MAX_CAPACITY:
            raise OverflowError("capacity overflow")
        return required

    def _grow_amortized(self, additional: int) -> None:
        required = self._required(additional)
        if required <= self._capacity:
            return
        new_capacity = max(
            self._capacity * self._GROWTH_FACTOR, required, self._MIN_NON_ZERO_CAPACITY
        )
        self._resize(min(new_capacity, MAX_CAPACITY))

    def _grow_exact(self, additional: int) -> None:
        required = self._required(additional)
        if required > self._capacity:
            self._resize(required)

    def _normalize_index(self, idx: int) -> int:
        if idx < 0:
            idx += self._size
        if idx < 0 or idx >= self._size:
            raise IndexError("store index out of range")
        return idx

    # ------------------------------ capacity ---------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def allocator(self) -> Allocator:
        return self._alloc

    @property
    def stamp(self) -> int:
        return self._stamp

    def check(self, stamp: int) -> None:
        """Raise BorrowError unless no structural change happened since `stamp`."""
        if stamp != self._stamp:
            raise BorrowError("AssocList was modified while a view into it was alive")

    def reserve(self, additional: int) -> None:
        """Make room for at least `additional` more elements (amortized)."""
        self._grow_amortized(additional)

    def reserve_exact(self, additional: int) -> None:
        """Make room for exactly `additional` more elements, no speculative slack."""
        self._grow_exact(additional)

    def try_reserve(self, additional: int) -> None:
        """Like :meth:`reserve`, but report failure as TryReserveError."""
        self._try(self._grow_amortized, additional)

    def try_reserve_exact(self, additional: int) -> None:
        """Like :meth:`reserve_exact`, but report failure as TryReserveError."""
        self._try(self._grow_exact, additional)

    def _try(self, grow, additional: int) -> None:
        requested = self._size + max(additional, 0)
        try:
            grow(additional)
        except OverflowError:
            raise TryReserveError(TryReserveErrorKind.CAPACITY_OVERFLOW, requested) from None
        except MemoryError as exc:
            logger.debug("try_reserve(%d) failed: %s", additional, exc)
            raise TryReserveError(TryReserveErrorKind.ALLOC_ERROR, requested) from exc

    def shrink_to(self, min_capacity: int) -> None:
        """Lower capacity to max(len, `min_capacity`); never grows."""
        target = max(self._size, min_capacity)
        if target < self._capacity:
            self._resize(target)

    def shrink_to_fit(self) -> None:
        self.shrink_to(0)

    # ------------------------------ elements ---------------------------------

    def push(self, value: T) -> None:
        """Append `value` at the end. Amortized O(1)."""
        self._grow_amortized(1)
        self._buf[self._size] = value
        self._size += 1
        self._stamp += 1

    def swap_remove(self, idx: int) -> T:
        """Remove and return the element at `idx`, moving the last one into its slot.

        O(1); the relative order of the remaining elements is not preserved.

        Raises:
            IndexError: if `idx` is out of range.
        """
        i = self._normalize_index(idx)
        last = self._size - 1
        val = self._buf[i]
        self._buf[i] = self._buf[last]
        self._buf[last] = None
        self._size = last
        self._stamp += 1
        return val

    def clear(self) -> None:
        """Remove all items. Keeps capacity to avoid churn on re-use."""
        for i in range(self._size):
            self._buf[i] = None
        self._size = 0
        self._stamp += 1

    def take(self) -> DynamicArray[T]:
        """Move every element (and the buffer) into a new, detached array.

        This array is left empty with zero capacity. The caller owns the
        returned array and should :meth:`release` it once consumed.
        """
        out: DynamicArray[T] = DynamicArray(allocator=self._alloc)
        out._buf, out._size, out._capacity = self._buf, self._size, self._capacity
        self._buf = None
        self._size = 0
        self._capacity = 0
        self._stamp += 1
        return out

    def drain(self) -> list[T]:
        """Move every element out into a plain list, keeping the buffer.

        This array is left empty with its capacity unchanged, so refilling it
        needs no new allocation.
        """
        out = list(self)
        self.clear()
        return out

    def release(self) -> None:
        """Drop every element and hand the buffer back to the allocator."""
        if self._buf is not None:
            self.clear()
            self._alloc.deallocate(self._buf, self._capacity)
            self._buf = None
            self._capacity = 0

    def copy(self) -> DynamicArray[T]:
        out: DynamicArray[T] = DynamicArray(self._size, self._alloc)
        for i in range(self._size):
            out._buf[i] = self._buf[i]
        out._size = self._size
        return out

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[T]:
        """Yield items from left to right."""
        for i in range(self._size):
            yield self._buf[i]

    def __getitem__(self, idx: int) -> T:
        return self._buf[self._normalize_index(idx)]

    def __setitem__(self, idx: int, value: T) -> None:
        """Overwrite a slot in place; not a structural change."""
        self._buf[self._normalize_index(idx)] = value

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"DynamicArray({list(self)!r}, capacity={self._capacity})"


class ValueRef(Generic[K, V]):
    """A mutable reference to the value half of one stored ``(key, value)`` pair.

    Handed out by ``get_mut``, the entry API and the mutable iterators. The
    reference stays usable until the owning list changes shape; assigning
    through it is an in-place replacement and never invalidates anything.
    """

    __slots__ = ("_store", "_index", "_stamp")

    def __init__(self, store: DynamicArray[Tuple[K, V]], index: int) -> None:
        self._store = store
        self._index = index
        self._stamp = store.stamp

    def _pair(self) -> Tuple[K, V]:
        self._store.check(self._stamp)
        return self._store[self._index]

    def key(self) -> K:
        return self._pair()[0]

    def get(self) -> V:
        return self._pair()[1]

    def set(self, value: V) -> None:
        key, _ = self._pair()
        self._store[self._index] = (key, value)

    def replace(self, value: V) -> V:
        """Store `value` and return the value it replaced."""
        key, old = self._pair()
        self._store[self._index] = (key, value)
        return old

    value = property(get, set)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"ValueRef({self.get()!r})"
