import gc
import os
import random
import sys

import pytest

# Ensure we can import from the project
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from assoclist import AssocList, BorrowError, assoc_list


def build(size: int, seed: int, modulo: int):
    """Fill an AssocList and a dict reference with the same colliding inserts."""
    rng = random.Random(seed)
    al = AssocList.with_capacity(size)
    reference = {}
    for _ in range(size):
        key = rng.randint(-size, size) % modulo
        value = rng.randint(-500, 500)
        reference[key] = value
        al.insert(key, value)
    return al, reference


def test_keys():
    al = AssocList.with_capacity(5)
    for i in range(5):
        assert al.insert(-i - 1, i) is None
    assert all(k < 0 for k in al.keys())
    assert list(al) == list(al.keys())


def test_into_keys():
    al = AssocList.with_capacity(17)
    for i in range(17):
        assert al.insert(i + 1, -i) is None
    keys = list(al.into_keys())
    assert keys == list(range(1, 18))
    assert al.is_empty()


@pytest.mark.parametrize("seed", range(3))
def test_values(seed):
    al, reference = build(62, seed, 8)
    assert sorted(al.values()) == sorted(reference.values())


@pytest.mark.parametrize("seed", range(3))
def test_values_mut(seed):
    al, reference = build(62, seed, 15)
    assert sorted(ref.get() for ref in al.values_mut()) == sorted(reference.values())

    for ref in al.values_mut():
        ref.set(3938)
    assert all(v == 3938 for v in al.values())
    assert len(al) == len(reference)


@pytest.mark.parametrize("seed", range(3))
def test_into_values(seed):
    al, reference = build(62, seed, 6)
    assert sorted(al.into_values()) == sorted(reference.values())
    assert len(al) == 0


@pytest.mark.parametrize("seed", range(5))
def test_iter(seed):
    al, reference = build(40, seed, 30)
    assert sorted(al.iter()) == sorted(reference.items())


@pytest.mark.parametrize("seed", range(5))
def test_iter_mut(seed):
    al, reference = build(40, seed, 30)
    pairs = [(k, ref.get()) for k, ref in al.iter_mut()]
    assert sorted(pairs) == sorted(reference.items())

    for key, ref in al.iter_mut():
        ref.set(key * 2)
    assert all(v == k * 2 for k, v in al.iter())


@pytest.mark.parametrize("seed", range(5))
def test_drain(seed):
    al, reference = build(40, seed, 25)
    drained = dict(al.drain())
    assert drained == reference
    assert al.is_empty()


@pytest.mark.parametrize("seed", range(5))
def test_into_iter(seed):
    al, reference = build(40, seed, 20)
    assert dict(al.into_iter()) == reference
    assert al.is_empty()


def test_drain_yields_every_pair_once():
    al = assoc_list((1.5, "a"), (2.5, "b"), (3.5, "c"))
    pairs = list(al.drain())
    assert sorted(pairs) == [(1.5, "a"), (2.5, "b"), (3.5, "c")]
    assert len(al) == 0


def test_drain_keeps_capacity():
    al = AssocList.with_capacity(8)
    for i in range(5):
        al.insert(i, str(i))
    assert len(list(al.drain())) == 5
    assert al.is_empty()
    assert al.capacity() == 8


def test_into_iter_takes_the_buffer():
    al = AssocList.with_capacity(8)
    al.insert(1, "a")
    assert list(al.into_iter()) == [(1, "a")]
    assert al.capacity() == 0


def test_abandoned_drain_still_empties():
    al = assoc_list((1, "a"), (2, "b"), (3, "c"))
    with al.drain() as pairs:
        assert next(pairs) == (1, "a")
    assert al.is_empty()
    assert list(pairs) == []


def test_unconsumed_drain_empties_on_collection():
    al = assoc_list((1, "a"), (2, "b"))
    drain = al.drain()
    assert al.is_empty()
    del drain
    gc.collect()
    assert al.is_empty()
    al.insert(3, "c")
    assert list(al.iter()) == [(3, "c")]


def test_list_usable_during_drain():
    al = assoc_list((1, "a"), (2, "b"))
    drain = al.drain()
    al.insert(9, "z")
    assert sorted(drain) == [(1, "a"), (2, "b")]
    assert list(al.iter()) == [(9, "z")]


def test_length_hint():
    al = assoc_list((1, "a"), (2, "b"), (3, "c"))
    it = al.iter()
    assert it.__length_hint__() == 3
    next(it)
    assert it.__length_hint__() == 2
    drain = al.drain()
    assert drain.__length_hint__() == 3
    next(drain)
    assert drain.__length_hint__() == 2
    drain.close()
    assert drain.__length_hint__() == 0


def test_iterators_are_single_pass():
    al = assoc_list((1, "a"), (2, "b"))
    keys = al.keys()
    assert list(keys) == [1, 2]
    assert list(keys) == []
    assert list(al.keys()) == [1, 2]


def test_structural_change_during_iteration():
    al = assoc_list((1, "a"), (2, "b"), (3, "c"))
    it = al.iter()
    next(it)
    al.insert(4, "d")
    with pytest.raises(BorrowError):
        next(it)


def test_value_replacement_during_iteration_is_fine():
    al = assoc_list((1, "a"), (2, "b"))
    for key in al.keys():
        al.insert(key, key * 10)
    assert sorted(al.iter()) == [(1, 10), (2, 20)]


def test_exhausted_iterator_ignores_later_changes():
    al = assoc_list((1, "a"))
    it = al.values()
    assert list(it) == ["a"]
    al.insert(2, "b")
    assert list(it) == []
