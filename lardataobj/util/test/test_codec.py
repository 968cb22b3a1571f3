import json
import dataclasses

import numpy

from lardataobj.util.codec import dataclass_dictify, json_dumps, to_pod


@dataclass_dictify
@dataclasses.dataclass
class Params:
    name: str = "plain"
    count: int = 3
    scale: float | None = None
    verbose: bool = False


def test_from_dict_converts():
    params = Params.from_dict(dict(count="7", scale="0.5", verbose="yes"))
    assert params.name == "plain"
    assert params.count == 7
    assert params.scale == 0.5
    assert params.verbose is True


def test_from_dict_defaults():
    params = Params.from_dict(dict(count=None))
    assert params == Params()
    assert Params.from_dict(Params(count=4).to_dict()) == Params(count=4)


def test_json():
    dat = dict(n=numpy.int64(3), x=numpy.float32(0.5), a=numpy.arange(3),
               p=Params())
    got = json.loads(json_dumps(dat))
    assert got["n"] == 3
    assert got["x"] == 0.5
    assert got["a"] == [0, 1, 2]
    assert got["p"]["count"] == 3


def test_to_pod():
    assert to_pod(numpy.array([1, 2])) == [1, 2]
    assert to_pod(numpy.int16(4)) == 4
    assert to_pod(Params())["name"] == "plain"
