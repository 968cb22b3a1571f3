import numpy
import pytest

from lardataobj.util.lazyvector import LazyVector, LazyVectorIndexError


def test_empty():
    lv = LazyVector()
    assert lv.empty()
    assert lv.size() == 0
    assert lv.data_empty()
    assert lv.data_begin_index() == 0
    assert lv.data_end_index() == 0
    assert lv.data_defvalue() == 0


def test_reads_do_not_allocate():
    lv = LazyVector(10, default=-1)
    assert len(lv) == 10
    assert not lv.empty()
    for pos in range(10):
        assert lv[pos] == -1
        assert lv.const_get(pos) == -1
        assert lv.const_at(pos) == -1
    assert lv.data_empty()
    assert lv.tolist() == [-1] * 10


def test_checked_access():
    lv = LazyVector(10)
    with pytest.raises(LazyVectorIndexError) as err:
        lv.at(12)
    assert "Index 12" in str(err.value)
    assert "size: 10" in str(err.value)
    with pytest.raises(IndexError):
        lv.const_at(10)
    with pytest.raises(IndexError):
        lv.set_at(10, 1)
    assert lv.data_empty()


def test_expansion():
    lv = LazyVector(10)
    lv[4] = 7
    assert lv.data_begin_index() == 4
    assert lv.data_end_index() == 5
    assert lv.data_size() == 1

    lv[2] = 5
    assert lv.data_begin_index() == 2
    assert lv.data() == [5, 0, 7]

    lv[6] = 1
    assert lv.data() == [5, 0, 7, 0, 1]
    assert lv.tolist() == [0, 0, 5, 0, 7, 0, 1, 0, 0, 0]
    assert lv.data_has_index(3)
    assert not lv.data_has_index(7)

    # same write again does not grow
    lv[6] = 1
    assert lv.data_size() == 5
    assert lv.size() == 10


def test_get_expands_within_size():
    lv = LazyVector(10, default=3)
    assert lv.get(5) == 3
    assert lv.data_size() == 1
    assert lv.at(7) == 3
    assert lv.data_size() == 3
    assert lv.get(20) == 3
    assert lv.data_end_index() == 8


def test_write_beyond_size_grows():
    lv = LazyVector(3)
    lv[5] = 1
    assert lv.size() == 6
    assert lv[5] == 1


def test_resize():
    lv = LazyVector(10)
    lv[2] = 5
    lv[6] = 1
    lv.resize(5)
    assert lv.size() == 5
    assert lv.data_end_index() == 5
    assert lv[6] == 0

    lv.resize(10)
    assert lv.data_end_index() == 5
    assert lv[6] == 0
    assert lv[2] == 5

    lv.resize(2)
    assert lv.data_empty()
    assert lv.size() == 2


def test_clear_reserve_shrink():
    lv = LazyVector(10)
    lv.reserve(100)
    assert lv.data_empty()
    lv[1] = 0
    lv[3] = 4
    lv[8] = 0
    lv.shrink_to_fit()
    assert lv.data_begin_index() == 1
    assert lv.data() == [0, 0, 4, 0, 0, 0, 0, 0]
    assert lv.tolist() == [0, 0, 0, 4, 0, 0, 0, 0, 0, 0]

    lv[3] = 4
    lv.clear()
    assert lv.size() == 0
    assert lv.data_empty()


def test_data_init():
    lv = LazyVector(10, default=2)
    lv[0] = 9
    lv.data_init(8, 20)
    assert lv.data_begin_index() == 8
    assert lv.data() == [2, 2]
    assert lv[0] == 2

    lv.data_prepare(3)
    assert lv.data_begin_index() == 0
    assert lv.data_size() == 3

    lv.data_init(5, 5)
    assert lv.data_empty()


def test_to_numpy():
    lv = LazyVector(6)
    lv[1] = 3
    lv[3] = -4
    arr = lv.to_numpy(dtype=numpy.int16)
    assert arr.dtype == numpy.int16
    assert arr.tolist() == [0, 3, 0, -4, 0, 0]


def test_empty_window_is_ordered():
    lv = LazyVector(10)
    assert lv.data_begin_index() == lv.data_end_index() == 10
    assert lv.data_begin_index() <= lv.data_end_index() <= lv.size()
    assert not lv.data_has_index(9)

    lv[3] = 1
    lv.resize(2)
    assert lv.data_empty()
    assert lv.data_begin_index() == lv.data_end_index() == 2
    lv.resize(6)
    assert lv.data_begin_index() <= lv.data_end_index() <= lv.size()
