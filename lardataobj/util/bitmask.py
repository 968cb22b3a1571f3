#!/usr/bin/env python
'''
Tri-state flags stored as bits.

A BitMask holds, for each flag, whether it is defined and, if so,
whether it is set.  This is kept in two integers:

- presence :: bit i is 1 if flag i is defined
- values :: bit i is 1 if flag i is defined and set

The mask algebra (merge, combine, intersect, unset, negate) follows a
three-valued logic where "-" denotes an undefined flag.  For each
operation the table below gives the result for a base flag (row) and a
mask flag (column):

    merge       -  0  1     combine     -  0  1     intersect   -  0  1
          -     -  0  1           -     -  0  1           -     -  0  1
          0     0  0  1           0     0  0  1           0     0  0  0
          1     1  0  1           1     1  1  1           1     1  0  1

    unset       -  0  1
          -     -  0  0
          0     0  0  0
          1     1  1  0

When the right operand is a plain set of bits, each bit in it is taken
as defined and set, with the exception of intersection where a bit
which is 0 in the operand unsets a defined flag of the base.
'''


class FlagError(Exception):
    '''
    Base of all errors raised by flag containers.
    '''
    pass


class FlagNotDefinedError(FlagError):
    '''
    The flag being tested is not defined.
    '''
    pass


class OutOfRangeError(FlagError, IndexError):
    '''
    The flag is not supported by the container.
    '''
    pass


class Flag:
    '''
    A single flag, identified by its bit index.
    '''

    __slots__ = ("index",)

    def __init__(self, index):
        index = int(index)
        if index < 0:
            raise ValueError(f'flag index must not be negative: {index}')
        self.index = index

    @property
    def bits(self):
        return 1 << self.index

    def __index__(self):
        return self.index

    def __int__(self):
        return self.index

    def __hash__(self):
        return hash(self.index)

    def __eq__(self, other):
        if isinstance(other, Flag):
            return self.index == other.index
        if isinstance(other, int):
            return self.index == other
        return NotImplemented

    def __lt__(self, other):
        return self.index < int(other)

    def __le__(self, other):
        return self.index <= int(other)

    def __gt__(self, other):
        return self.index > int(other)

    def __ge__(self, other):
        return self.index >= int(other)

    def __str__(self):
        return f'[{self.index}]'

    def __repr__(self):
        return f'Flag({self.index})'

    def __or__(self, other):
        return Bits(self.bits) | other

    def __add__(self, other):
        return Bits(self.bits) + other

    def __and__(self, other):
        return Bits(self.bits) & other

    def __sub__(self, other):
        return Bits(self.bits) - other

    def __pos__(self):
        return make_set(self)

    def __neg__(self):
        return make_unset(self)

    __invert__ = __neg__


class Bits:
    '''
    A plain set of bits.
    '''

    __slots__ = ("data",)

    def __init__(self, data=0):
        if isinstance(data, Flag):
            data = data.bits
        self.data = int(data)

    def empty(self):
        return self.data == 0

    def all(self, bits):
        '''
        True if all the specified bits are set.
        '''
        bits = to_bits(bits)
        return (self.data & bits) == bits

    def any(self, bits):
        '''
        True if at least one of the specified bits is set.
        '''
        return (self.data & to_bits(bits)) != 0

    def none(self, bits):
        '''
        True if none of the specified bits is set.
        '''
        return (self.data & to_bits(bits)) == 0

    def only(self, bits):
        '''
        True if no bit is set other than the specified ones.
        '''
        return (self.data & ~to_bits(bits)) == 0

    def set(self, bits):
        self.data |= to_bits(bits)

    def unset(self, bits):
        self.data &= ~to_bits(bits)

    def keep_only(self, bits):
        self.data &= to_bits(bits)

    def clear(self):
        self.data = 0

    def select(self, bits):
        '''
        Return the bits that are set both here and in bits.
        '''
        return Bits(self.data & to_bits(bits))

    def exclude(self, bits):
        '''
        Return the bits that are set here and not in bits.
        '''
        return Bits(self.data & ~to_bits(bits))

    def combine(self, bits):
        return Bits(self.data | to_bits(bits))

    def invert(self, width=64):
        '''
        Return all and only the bits, out of width, that are not set.
        '''
        return Bits(~self.data & ((1 << width) - 1))

    def __bool__(self):
        return self.data != 0

    def __int__(self):
        return self.data

    __index__ = __int__

    def __hash__(self):
        return hash(self.data)

    def __eq__(self, other):
        if isinstance(other, (Bits, Flag, int)):
            return self.data == to_bits(other)
        return NotImplemented

    def __lt__(self, other):
        return self.data < to_bits(other)

    def __repr__(self):
        return f'Bits({self.data:#x})'

    def __or__(self, other):
        if isinstance(other, BitMask):
            return BitMask.combine_with_mask(other, self)
        return self.combine(other)

    __ror__ = __or__

    def __add__(self, other):
        if isinstance(other, BitMask):
            return BitMask.merge_into_mask(make_mask(self), other)
        return self.combine(other)

    __radd__ = __add__

    def __and__(self, other):
        if isinstance(other, BitMask):
            return BitMask.intersect_with_mask(make_mask(self), other)
        other = to_bits(other)
        return BitMask.from_values(self.data | other, self.data & other)

    def __sub__(self, other):
        if isinstance(other, BitMask):
            return BitMask.unset_mask(make_mask(self), other)
        return BitMask.unset_mask(make_mask(self), Bits(other))

    def __pos__(self):
        return make_mask(self)

    def __neg__(self):
        return BitMask.negate_mask(self)

    __invert__ = __neg__


def to_bits(obj):
    '''
    Return the integer bits of a Flag, a Bits or an integer.

    An integer is taken as bits, not as a flag index.
    '''
    if isinstance(obj, Flag):
        return obj.bits
    if isinstance(obj, Bits):
        return obj.data
    if isinstance(obj, int):
        return obj
    raise TypeError(f'can not interpret {type(obj).__name__} as bits')


def to_flag(obj):
    '''
    Return a Flag from a Flag or an integer flag index.
    '''
    if isinstance(obj, Flag):
        return obj
    return Flag(obj)


class BitMask:
    '''
    A set of tri-state flags of fixed capacity.
    '''

    FlagError = FlagError
    FlagNotDefinedError = FlagNotDefinedError
    OutOfRangeError = OutOfRangeError

    default_capacity = 64

    def __init__(self, *items, capacity=None):
        '''
        Create a mask merging, in order, the given items.

        Each item is a Flag (set), a Bits (all bits set) or another
        BitMask (merged in).  Integer items are flag indices.
        '''
        if capacity is None:
            capacity = self.default_capacity
        self._capacity = int(capacity)
        self.presence = 0
        self.values = 0
        for item in items:
            if isinstance(item, BitMask):
                pres, vals = item.presence, item.values
            elif isinstance(item, Bits):
                pres = vals = item.data
            else:
                pres = vals = to_flag(item).bits
            self._assign(self.presence | pres, (self.values & ~pres) | vals)

    def _assign(self, presence, values):
        full = (1 << self._capacity) - 1
        self.presence = presence & full
        self.values = values & self.presence

    def _new(self, presence, values):
        '''
        Return a plain BitMask with our capacity and the given planes.
        '''
        mask = BitMask(capacity=self._capacity)
        mask._assign(presence, values)
        return mask

    @classmethod
    def create(cls, *items, capacity=None):
        return BitMask(*items, capacity=capacity)

    @classmethod
    def from_values(cls, defined, values=None, capacity=None):
        '''
        Return a mask from plain integers.

        With a single argument, all those bits are defined and set.  A
        bit requested to be set is also defined.
        '''
        defined = to_bits(defined)
        values = defined if values is None else to_bits(values)
        mask = BitMask(capacity=capacity)
        mask._assign(defined | values, values)
        return mask

    def capacity(self):
        return self._capacity

    def copy_mask(self):
        '''
        Return a plain BitMask with the same flags.
        '''
        return self._new(self.presence, self.values)

    def copy(self):
        return self.copy_mask()

    # queries

    def is_defined(self, flag):
        '''
        True if the flag, or all the bits, are defined.
        '''
        bits = self._bits(flag)
        return (self.presence & bits) == bits

    def is_undefined(self, flag):
        '''
        True if the flag, or all the bits, are undefined.
        '''
        return (self.presence & self._bits(flag)) == 0

    def get(self, flag):
        '''
        Return the value of the flag without checking if it is defined.
        '''
        return (self.values & to_flag(flag).bits) != 0

    def is_set(self, flag):
        bits = to_flag(flag).bits
        return (self.presence & bits) != 0 and (self.values & bits) != 0

    def is_unset(self, flag):
        bits = to_flag(flag).bits
        return (self.presence & bits) != 0 and (self.values & bits) == 0

    def all(self, bits):
        '''
        True if all the specified bits are defined and set.
        '''
        bits = self._bits(bits)
        return (self.values & bits) == bits

    def any(self, bits):
        '''
        True if at least one of the specified bits is defined and set.
        '''
        return (self.values & self._bits(bits)) != 0

    def none(self, bits):
        '''
        True if all the specified bits are defined and unset.
        '''
        bits = self._bits(bits)
        return (self.presence & bits) == bits and (self.values & bits) == 0

    def any_set(self, mask):
        '''
        True if any of the flags set in mask is also set here.
        '''
        return (self.values & mask.values) != 0

    def none_set(self, mask):
        return not self.any_set(mask)

    def match(self, mask):
        '''
        True if all the flags defined in mask have here the same value.
        '''
        pres = mask.presence
        return (self.presence & pres) == pres and (self.values & pres) == mask.values

    # setters

    def set(self, *flags):
        bits = 0
        for flag in flags:
            bits |= to_flag(flag).bits
        self._assign(self.presence | bits, self.values | bits)

    def range_set(self, flags):
        self.set(*flags)

    def unset(self, *flags):
        bits = 0
        for flag in flags:
            bits |= to_flag(flag).bits
        self._assign(self.presence | bits, self.values & ~bits)

    def range_unset(self, flags):
        self.unset(*flags)

    def remove(self, *flags):
        '''
        Make the flags undefined.
        '''
        bits = 0
        for flag in flags:
            bits |= to_flag(flag).bits
        self._assign(self.presence & ~bits, self.values & ~bits)

    def clear(self):
        '''
        Make all flags undefined.
        '''
        self.presence = 0
        self.values = 0

    # algebra

    @staticmethod
    def merge_into_mask(base, mask):
        '''
        Return base with the flags defined in mask overriding it.
        '''
        if isinstance(mask, BitMask):
            pres = base.presence | mask.presence
            vals = (base.values & ~mask.presence) | mask.values
        else:
            bits = to_bits(mask)
            pres = base.presence | bits
            vals = base.values | bits
        return base._new(pres, vals)

    @staticmethod
    def combine_with_mask(base, mask):
        '''
        Return the OR of base and mask.
        '''
        if isinstance(mask, BitMask):
            return base._new(base.presence | mask.presence,
                             base.values | mask.values)
        bits = to_bits(mask)
        return base._new(base.presence | bits, base.values | bits)

    @staticmethod
    def intersect_with_mask(base, mask):
        '''
        Return the AND of base and mask.

        A flag undefined in one operand takes the value of the other.
        '''
        if isinstance(mask, BitMask):
            pres = base.presence | mask.presence
            vals = (base.values & (mask.values | ~mask.presence)) \
                | (mask.values & ~base.presence)
            return base._new(pres, vals)
        bits = to_bits(mask)
        return base._new(base.presence | bits,
                         (base.values & bits) | (bits & ~base.presence))

    @staticmethod
    def unset_mask(base, mask):
        '''
        Return base with the flags set in mask defined and unset.
        '''
        if isinstance(mask, BitMask):
            return base._new(base.presence | mask.presence,
                             base.values & ~mask.values)
        bits = to_bits(mask)
        return base._new(base.presence | bits, base.values & ~bits)

    @staticmethod
    def negate_mask(mask):
        '''
        Return mask with the defined flags flipped.

        Bits or a flag give a mask with only those bits, defined and unset.
        '''
        if isinstance(mask, BitMask):
            return mask._new(mask.presence, mask.presence & ~mask.values)
        return BitMask.from_values(to_bits(mask), 0)

    def __or__(self, other):
        return BitMask.combine_with_mask(self, other)

    def __ror__(self, other):
        return BitMask.combine_with_mask(self, other)

    def __and__(self, other):
        return BitMask.intersect_with_mask(self, other)

    def __rand__(self, other):
        return BitMask.intersect_with_mask(self, other)

    def __add__(self, other):
        return BitMask.merge_into_mask(self, other)

    def __sub__(self, other):
        return BitMask.unset_mask(self, other)

    def __invert__(self):
        return BitMask.negate_mask(self)

    def __pos__(self):
        return self.copy_mask()

    def __eq__(self, other):
        if not isinstance(other, BitMask):
            return NotImplemented
        return self.presence == other.presence and self.values == other.values

    def __hash__(self):
        return hash((self.presence, self.values))

    def dump(self, nbits=None):
        '''
        Return a string with one character per flag, highest first.

        A flag is shown as "1" if set, "0" if unset and "-" if undefined.
        '''
        if nbits is None:
            nbits = self._capacity
        chars = []
        for index in reversed(range(nbits)):
            bit = 1 << index
            if not self.presence & bit:
                chars.append('-')
            elif self.values & bit:
                chars.append('1')
            else:
                chars.append('0')
        return '{' + ''.join(chars) + '}'

    def __str__(self):
        return self.dump()

    def __repr__(self):
        return f'{type(self).__name__}({self.dump()})'

    def _bits(self, obj):
        if isinstance(obj, int) and not isinstance(obj, bool):
            return to_flag(obj).bits
        return to_bits(obj)


def make_mask(*items, capacity=None):
    '''
    Return a mask with the given flags and bits defined and set.
    '''
    return BitMask(*items, capacity=capacity)


def make_set(*flags):
    '''
    Return a mask with only the given flags, all defined and set.
    '''
    mask = BitMask()
    mask.set(*flags)
    return mask


def make_unset(*flags):
    '''
    Return a mask with only the given flags, all defined and unset.
    '''
    mask = BitMask()
    mask.unset(*flags)
    return mask
