from __future__ import annotations

import ctypes
import logging
from typing import Any

from .errors import AllocError

logger = logging.getLogger(__name__)


class Allocator:
    """Strategy deciding where the slot buffers of a store come from.

    A buffer is a ctypes array of ``py_object`` with room for ``capacity``
    references. The strategy only changes where memory is obtained; it has
    no influence on what the list stores or how it behaves.
    """

    __slots__ = ()

    def allocate(self, capacity: int) -> Any:
        """Return a fresh buffer with ``capacity`` slots or raise AllocError."""
        raise NotImplementedError

    def deallocate(self, buf: Any, capacity: int) -> None:
        """Give back a buffer previously returned by :meth:`allocate`."""

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{type(self).__name__}()"


class DefaultAllocator(Allocator):
    """Plain ctypes arrays; memory is reclaimed by the garbage collector."""

    __slots__ = ()

    def allocate(self, capacity: int) -> Any:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        return (capacity * ctypes.py_object)()


# Shared instance used whenever a container is built without an allocator.
GLOBAL = DefaultAllocator()


class BoundedAllocator(Allocator):
    """An allocator with a fixed budget of slots.

    Every buffer handed out is charged against ``limit``. With
    ``reclaim=False`` memory, once acquired, is never credited back, which
    mimics an arena that is only ever bumped forward.
    """

    __slots__ = ("limit", "in_use", "reclaim")

    def __init__(self, limit: int, reclaim: bool = True) -> None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        self.limit = limit
        self.in_use = 0
        self.reclaim = reclaim

    @property
    def available(self) -> int:
        return self.limit - self.in_use

    def allocate(self, capacity: int) -> Any:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if capacity > self.available:
            logger.debug(
                "refusing %d slots (%d of %d in use)", capacity, self.in_use, self.limit
            )
            raise AllocError(f"{capacity} slots requested, {self.available} available")
        self.in_use += capacity
        return (capacity * ctypes.py_object)()

    def deallocate(self, buf: Any, capacity: int) -> None:
        if self.reclaim:
            self.in_use -= capacity

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"BoundedAllocator(limit={self.limit}, in_use={self.in_use})"
