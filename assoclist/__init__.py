from .allocator import Allocator, BoundedAllocator, DefaultAllocator
from .assoc_list import AssocList, assoc_list
from .entry import Entry, OccupiedEntry, VacantEntry
from .errors import AllocError, BorrowError, TryReserveError, TryReserveErrorKind
from .iter import Drain, IntoIter, IntoKeys, IntoValues, Iter, IterMut, Keys, Values, ValuesMut
from .store import MAX_CAPACITY, DynamicArray, ValueRef

__all__ = [
    "AssocList",
    "assoc_list",
    "Entry",
    "OccupiedEntry",
    "VacantEntry",
    "ValueRef",
    "DynamicArray",
    "MAX_CAPACITY",
    "Allocator",
    "DefaultAllocator",
    "BoundedAllocator",
    "AllocError",
    "BorrowError",
    "TryReserveError",
    "TryReserveErrorKind",
    "Iter",
    "IterMut",
    "Keys",
    "Values",
    "ValuesMut",
    "IntoIter",
    "IntoKeys",
    "IntoValues",
    "Drain",
]
