import pytest

from lardataobj.util.bitmask import (
    Flag, Bits, BitMask, FlagError, FlagNotDefinedError, OutOfRangeError,
    make_mask, make_set, make_unset
)


def state(mask, flag=0):
    '''
    Return "-", "0" or "1" for the flag of the mask.
    '''
    if mask.is_undefined(flag):
        return '-'
    return '1' if mask.is_set(flag) else '0'


def from_state(st, flag=0):
    if st == '-':
        return BitMask()
    if st == '0':
        return make_unset(flag)
    return make_set(flag)


# rows are the base, columns the mask in order "-", "0", "1"
mask_tables = dict(
    merge_into_mask = dict(zip("-01", ("-01", "001", "101"))),
    combine_with_mask = dict(zip("-01", ("-01", "001", "111"))),
    intersect_with_mask = dict(zip("-01", ("-01", "000", "101"))),
    unset_mask = dict(zip("-01", ("-00", "000", "110"))),
)

# rows are the base, columns the bit in order 0, 1
bits_tables = dict(
    merge_into_mask = dict(zip("-01", ("-1", "01", "11"))),
    combine_with_mask = dict(zip("-01", ("-1", "01", "11"))),
    intersect_with_mask = dict(zip("-01", ("-1", "00", "01"))),
    unset_mask = dict(zip("-01", ("-0", "00", "10"))),
)


@pytest.mark.parametrize("opname", list(mask_tables))
def test_mask_truth_table(opname):
    op = getattr(BitMask, opname)
    for base, row in mask_tables[opname].items():
        for other, want in zip("-01", row):
            got = state(op(from_state(base), from_state(other)))
            assert got == want, f'{opname}({base}, {other}) = {got} != {want}'


@pytest.mark.parametrize("opname", list(bits_tables))
def test_bits_truth_table(opname):
    op = getattr(BitMask, opname)
    for base, row in bits_tables[opname].items():
        for bit, want in zip((0, 1), row):
            got = state(op(from_state(base), Bits(bit)))
            assert got == want, f'{opname}({base}, bits={bit}) = {got} != {want}'


def test_operators_spell_algebra():
    a = BitMask.from_values(0b0111, 0b0101)
    b = BitMask.from_values(0b1110, 0b0011)
    assert a | b == BitMask.combine_with_mask(a, b)
    assert a & b == BitMask.intersect_with_mask(a, b)
    assert a + b == BitMask.merge_into_mask(a, b)
    assert a - b == BitMask.unset_mask(a, b)
    assert ~a == BitMask.negate_mask(a)
    assert +a == a
    assert +a is not a


def test_commutative_and_negation():
    masks = [BitMask.from_values(d, v & d)
             for d in (0, 0b0011, 0b1010, 0b1111)
             for v in (0, 0b0110, 0b1111)]
    for a in masks:
        assert ~~a == a
        assert state(~a, 1) == {'-': '-', '0': '1', '1': '0'}[state(a, 1)]
        for b in masks:
            assert a | b == b | a
            assert a & b == b & a


def test_negate_bits():
    mask = BitMask.negate_mask(Bits(0b101))
    assert mask.is_unset(0)
    assert mask.is_undefined(1)
    assert mask.is_unset(2)
    assert -Bits(0b101) == mask
    assert ~Flag(2) == make_unset(2)


def test_set_unset_remove():
    mask = BitMask()
    mask.set(3)
    assert mask.is_set(3)
    assert mask.is_defined(3)
    assert not mask.is_defined(4)
    assert not mask.is_set(4)
    assert not mask.is_unset(4)

    mask.unset(3, Flag(5))
    assert mask.is_unset(3)
    assert mask.is_unset(5)
    assert not mask.get(3)

    mask.range_set([1, 2])
    assert mask.is_set(1) and mask.is_set(2)
    mask.range_unset(range(1, 3))
    assert mask.is_unset(1) and mask.is_unset(2)

    mask.remove(3)
    assert mask.is_undefined(3)
    assert mask.is_defined(Bits(0b100110))

    mask.clear()
    assert mask.is_undefined(Bits(0b111111))
    assert mask == BitMask()


def test_from_values():
    mask = BitMask.from_values(0b1100, 0b0100)
    assert mask.is_undefined(0)
    assert mask.is_undefined(1)
    assert mask.is_set(2)
    assert mask.is_unset(3)
    # set values are defined too
    mask = BitMask.from_values(0b0001, 0b0010)
    assert mask.is_unset(0)
    assert mask.is_set(1)
    assert BitMask.from_values(0b11) == make_set(0, 1)


def test_queries():
    mask = BitMask.from_values(0b111, 0b011)
    assert mask.all(Bits(0b011))
    assert not mask.all(Bits(0b111))
    assert mask.any(Bits(0b110))
    assert not mask.any(Bits(0b100))
    assert mask.none(Bits(0b100))
    assert not mask.none(Bits(0b110))
    assert not mask.none(Bits(0b1000))  # undefined

    assert mask.any_set(make_set(1, 5))
    assert mask.none_set(make_set(2, 5))
    assert mask.match(make_mask(Flag(0), -Flag(2)))
    assert not mask.match(make_mask(Flag(0), Flag(2)))
    assert not mask.match(make_set(4))


def test_bits_operations():
    bits = Bits(0b1010)
    assert bits.all(0b1000)
    assert not bits.all(0b1100)
    assert not bits.any(0b0101)
    assert bits.none(0b0101)
    assert bits.only(0b1110)
    assert not bits.only(0b0110)
    assert bits.select(0b0011) == Bits(0b0010)
    assert bits.exclude(0b0011) == Bits(0b1000)
    assert bits.combine(0b0001) == Bits(0b1011)
    assert bits.invert(4) == Bits(0b0101)
    assert not Bits().any(0b1111)
    assert Bits().empty()

    bits.set(Flag(0))
    assert bits == 0b1011
    bits.unset(0b0010)
    assert bits == 0b1001
    bits.keep_only(0b0001)
    assert bits == Flag(0)
    bits.clear()
    assert bits.empty()


def test_flag_and_bits_operators():
    assert Flag(1) | Flag(2) == Bits(0b110)
    assert Flag(1) + Flag(2) == Bits(0b110)
    assert (+Flag(1)).is_set(1)
    assert (-Flag(1)).is_unset(1)

    both = Bits(0b11) & Bits(0b10)
    assert both.is_unset(0)
    assert both.is_set(1)

    left = Bits(0b11) - Bits(0b10)
    assert left.is_set(0)
    assert left.is_unset(1)

    merged = Bits(0b01) + make_unset(0)
    assert merged.is_unset(0)


def test_flag():
    flag = Flag(3)
    assert flag == 3
    assert flag.index == 3
    assert flag.bits == 0b1000
    assert flag < 4
    assert str(flag) == "[3]"
    with pytest.raises(ValueError):
        Flag(-1)


def test_capacity_and_dump():
    mask = BitMask(capacity=8)
    assert mask.capacity() == 8
    mask.set(9)
    assert mask.is_undefined(9)

    mask = BitMask.from_values(0b101, 0b001, capacity=4)
    assert mask.dump() == "{-0-1}"
    assert str(mask) == "{-0-1}"


def test_create_merges_in_order():
    mask = BitMask.create(Flag(1), make_unset(1), Bits(0b100))
    assert mask.is_unset(1)
    assert mask.is_set(2)
    assert mask == BitMask(Flag(1), -Flag(1), Flag(2))


def test_errors():
    assert issubclass(FlagNotDefinedError, FlagError)
    assert issubclass(OutOfRangeError, FlagError)
    assert issubclass(OutOfRangeError, IndexError)
    assert BitMask.OutOfRangeError is OutOfRangeError
