import pytest

from lardataobj.util.bitmask import Flag, BitMask, FlagNotDefinedError, OutOfRangeError
from lardataobj.util.flagset import FlagSet, storage_capacity


def test_capacity():
    assert FlagSet(7).capacity() == 8
    assert FlagSet(8).capacity() == 8
    assert FlagSet(9).capacity() == 16
    assert FlagSet(32).capacity() == 32
    assert FlagSet(33).capacity() == 64
    assert storage_capacity(0) == 8
    with pytest.raises(ValueError):
        FlagSet(65)


def test_size_and_flags():
    flags = FlagSet(7)
    assert flags.size() == 7
    assert flags.is_flag(6)
    assert not flags.is_flag(7)
    assert flags.is_allocated(7)
    assert not flags.is_allocated(8)


def test_test():
    flags = FlagSet(7)
    flags.set(1, 3)
    flags.unset(2)

    assert flags.test(1)
    assert flags.test(Flag(3))
    assert not flags.test(2)
    with pytest.raises(FlagNotDefinedError):
        flags.test(0)

    # allocated but not supported
    flags.set(7)
    assert flags.is_set(7)
    with pytest.raises(OutOfRangeError):
        flags.test(7)
    with pytest.raises(FlagSet.OutOfRangeError):
        flags.test(8)
    with pytest.raises(IndexError):
        flags.test(64)

    # beyond storage
    flags.set(8)
    assert flags.is_undefined(8)
    assert not flags.is_set(8)
    assert not flags.is_unset(8)


def test_mutators():
    flags = FlagSet(16)
    flags.range_set([4, 5])
    flags.range_unset([6])
    assert flags.test(4) and flags.test(5)
    assert not flags.test(6)
    flags.remove(5)
    with pytest.raises(FlagNotDefinedError):
        flags.test(5)
    flags.clear()
    assert flags.is_undefined(4)


def test_construction_and_compare():
    one = FlagSet(7, Flag(1), -Flag(2))
    two = FlagSet(7)
    two.set(1)
    two.unset(2)
    assert one == two
    two.set(4)
    assert one != two

    copy = one.copy()
    assert isinstance(copy, FlagSet)
    assert copy.size() == 7
    assert copy == one

    mask = +one
    assert type(mask) is BitMask
    assert mask == one

    assert FlagSet.from_values(7, 0b110, 0b010) == one


def test_dump():
    flags = FlagSet(4, Flag(0), -Flag(2))
    assert flags.dump() == "{-0-1}"
