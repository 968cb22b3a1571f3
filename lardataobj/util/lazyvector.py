#!/usr/bin/env python
'''
A sequence storing only the span between its first and last written
elements.

LazyVector has a nominal size, like a list, but allocates memory only
for the contiguous window of elements that were explicitly written.
Elements outside that window read as the default value.  Writing to an
element outside the window grows the window to include it, filling the
gap with default values.

    >>> lv = LazyVector(10)
    >>> lv[4] = 7
    >>> lv.data_begin_index(), lv.data_size()
    (4, 1)
    >>> lv[2] = 5
    >>> lv.tolist()
    [0, 0, 5, 0, 7, 0, 0, 0, 0, 0]
'''

import numpy


class LazyVectorIndexError(IndexError):
    pass


class LazyVector:

    def __init__(self, size=0, default=None):
        self._nominal = int(size)
        self._default = 0 if default is None else default
        self._data = list()
        self._first = None

    # -- size information

    def size(self):
        return self._nominal

    def __len__(self):
        return self._nominal

    def empty(self):
        return self._nominal == 0

    def has_index(self, pos):
        return 0 <= pos < self._nominal

    def data_size(self):
        return len(self._data)

    def data_empty(self):
        return not self._data

    def data_defvalue(self):
        return self._default

    def data_begin_index(self):
        '''
        Index of the first stored element, or the nominal size if
        nothing is stored.
        '''
        if self._first is None:
            return self._nominal
        return self._first

    def data_end_index(self):
        '''
        Index past the last stored element, or the nominal size if
        nothing is stored.
        '''
        return self.data_begin_index() + len(self._data)

    def data_has_index(self, pos):
        if self._first is None:
            return False
        return self._first <= pos < self._first + len(self._data)

    def data(self):
        '''
        Return a copy of the stored window.
        '''
        return list(self._data)

    # -- element access

    def check_range(self, pos):
        if not self.has_index(pos):
            raise LazyVectorIndexError(
                f'Index {pos} is out of LazyVector range (size: {self._nominal})')

    def at(self, pos):
        '''
        Return the element, allocating storage for it.
        '''
        self.check_range(pos)
        return self.get(pos)

    def const_at(self, pos):
        '''
        Return the element without allocating.
        '''
        self.check_range(pos)
        return self.const_get(pos)

    def get(self, pos):
        '''
        Return the element, allocating storage for it if within the
        nominal size.  The index is not checked.
        '''
        if self.has_index(pos):
            self.expand(pos)
        return self.const_get(pos)

    def const_get(self, pos):
        if self.data_has_index(pos):
            return self._data[pos - self._first]
        return self._default

    def __getitem__(self, pos):
        return self.const_get(pos)

    def __setitem__(self, pos, value):
        self.expand(pos)
        self._data[pos - self._first] = value

    def set_at(self, pos, value):
        '''
        Checked write.
        '''
        self.check_range(pos)
        self[pos] = value

    def __iter__(self):
        for pos in range(self._nominal):
            yield self.const_get(pos)

    # -- container operations

    def resize(self, size):
        '''
        Change the nominal size, dropping stored elements beyond it.
        '''
        size = int(size)
        self._nominal = size
        if self._first is None or self.data_end_index() <= size:
            return
        if size <= self._first:
            self.data_clear()
        else:
            del self._data[size - self._first:]

    def reserve(self, size):
        '''
        Storage is allocated lazily, this is only a hint and is ignored.
        '''
        pass

    def clear(self):
        self.data_clear()
        self._nominal = 0

    def shrink_to_fit(self):
        '''
        Storage holds no spare capacity, this does not change the window.
        '''
        pass

    def data_clear(self):
        self._data = list()
        self._first = None

    def data_prepare(self, start, end=None):
        '''
        Allocate the window [start, end) clipped to the nominal size.

        The content of the window is undetermined (currently default
        values): existing data is lost.  With a single argument, the
        window is [0, start).
        '''
        if end is None:
            start, end = 0, start
        self.data_init(start, end)

    def data_init(self, start, end=None):
        '''
        Allocate the window [start, end) filled with default values.

        Existing data is lost.  With a single argument, the window is
        [0, start).
        '''
        if end is None:
            start, end = 0, start
        start = max(int(start), 0)
        end = min(int(end), self._nominal)
        if end <= start:
            self.data_clear()
            return
        self._first = start
        self._data = [self._default] * (end - start)

    # -- storage growth

    def expand(self, pos):
        '''
        Make the storage window include pos.
        '''
        if self._first is None:
            self._first = pos
            self._data = [self._default]
            self.fix_size()
        elif pos < self._first:
            self._data[0:0] = [self._default] * (self._first - pos)
            self._first = pos
        elif pos >= self._first + len(self._data):
            self._data.extend([self._default] * (pos + 1 - self._first - len(self._data)))
            self.fix_size()

    def fix_size(self):
        '''
        Make sure the nominal size covers the stored window.
        '''
        if self._first is not None:
            self._nominal = max(self._nominal, self.data_end_index())

    # -- conversions

    def tolist(self):
        return list(self)

    def to_numpy(self, dtype=None):
        '''
        Return a dense numpy array of the nominal size.
        '''
        arr = numpy.full(self._nominal, self._default, dtype=dtype)
        if self._data:
            end = min(self.data_end_index(), self._nominal)
            arr[self._first:end] = self._data[:end - self._first]
        return arr

    def __repr__(self):
        return (f'LazyVector(size={self._nominal}, data_begin={self._first}, '
                f'data_size={len(self._data)})')
