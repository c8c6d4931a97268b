"""Exceptions raised by the association list and its backing store.

Absence of a key is never an error: lookups and removals return ``None`` (or
a caller supplied default). The classes below cover the remaining cases:

- ``BorrowError``: an entry, value reference or iterator was used after the
  list it points into changed shape underneath it.
- ``AllocError``: an allocator could not hand out the requested buffer.
- ``TryReserveError``: the recoverable form of a failed capacity request.
"""

from __future__ import annotations

import enum


class BorrowError(RuntimeError):
    """A view into an AssocList outlived the layout it was created for."""


class AllocError(MemoryError):
    """The allocator refused to provide a buffer of the requested size."""


class TryReserveErrorKind(enum.Enum):
    CAPACITY_OVERFLOW = "capacity overflow"
    ALLOC_ERROR = "allocation failed"


class TryReserveError(Exception):
    """Returned to the caller of ``try_reserve`` instead of failing hard.

    The container the request was made on is left exactly as it was.
    """

    def __init__(self, kind: TryReserveErrorKind, requested: int) -> None:
        super().__init__(f"cannot reserve {requested} slots: {kind.value}")
        self.kind = kind
        self.requested = requested
