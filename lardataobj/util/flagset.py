#!/usr/bin/env python
'''
A BitMask with a known number of supported flags.
'''

from .bitmask import (
    BitMask, FlagNotDefinedError, OutOfRangeError, to_flag
)

# Storage widths a flag set may use, smallest first.
storage_widths = (8, 16, 32, 64)


def storage_capacity(nflags):
    '''
    Return the smallest storage width holding nflags flags.
    '''
    for width in storage_widths:
        if nflags <= width:
            return width
    raise ValueError(f'too many flags for the storage: {nflags} > {storage_widths[-1]}')


class FlagSet(BitMask):
    '''
    A set of nflags tri-state flags.

    Flags with index below size() are supported.  The storage may
    allocate a few more (up to capacity()); those can be queried but
    test() refuses them.
    '''

    def __init__(self, nflags, *items):
        nflags = int(nflags)
        if nflags < 0:
            raise ValueError(f'number of flags must not be negative: {nflags}')
        self._nflags = nflags
        super().__init__(*items, capacity=storage_capacity(nflags))

    @classmethod
    def from_values(cls, nflags, defined, values=None):
        mask = BitMask.from_values(defined, values, capacity=storage_capacity(nflags))
        return cls(nflags, mask)

    def size(self):
        '''
        Number of supported flags.
        '''
        return self._nflags

    def is_flag(self, flag):
        return to_flag(flag).index < self._nflags

    def is_allocated(self, flag):
        return to_flag(flag).index < self._capacity

    def test(self, flag):
        '''
        Return whether the flag is set.

        Raise OutOfRangeError if the flag is not supported and
        FlagNotDefinedError if the flag is not defined.
        '''
        flag = to_flag(flag)
        if not self.is_flag(flag):
            raise OutOfRangeError(
                f'flag #{flag.index} out of range (size: {self._nflags})')
        if self.is_undefined(flag):
            raise FlagNotDefinedError(f'flag #{flag.index} is not defined')
        return self.is_set(flag)

    def copy(self):
        return FlagSet(self._nflags, self)

    def dump(self, nbits=None):
        if nbits is None:
            nbits = self._nflags
        return super().dump(nbits)
