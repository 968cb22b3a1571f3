import enum
import json
import typing
import numpy
import dataclasses

def to_pod(v):
    '''
    Try hard to return v as POD
    '''
    if isinstance(v, numpy.ndarray):
        return v.tolist()
    if isinstance(v, numpy.integer):
        return int(v)
    if isinstance(v, enum.Enum):
        return v.name.lower()
    if dataclasses.is_dataclass(v):
        return dataclasses.asdict(v, dict_factory = dict_factory)
    return v

def dict_factory(kv):
    '''
    Try hard to convert dataclass key/values to POD.

    Sutable for calls like:

        ddict = dataclasses.asdict(dclass, dict_factory=dict_factory)
    '''
    return {k:to_pod(v) for k,v in kv}

def field_value(field, obj):
    '''
    Return the value for the dataclass field from dict-like obj.

    Values are converted with the field type when it is a plain class,
    or an optional one.  Missing or None values take the field default.
    '''
    if field.default is not dataclasses.MISSING:
        dval = field.default
    elif field.default_factory is not dataclasses.MISSING:
        dval = field.default_factory()
    else:
        dval = None
    val = obj.get(field.name, None)
    if val is None:
        val = dval
    ftype = field.type
    args = [a for a in typing.get_args(ftype) if a is not type(None)]
    if len(args) == 1:
        ftype = args[0]
    if val is None or not isinstance(ftype, type):
        return val
    if ftype is bool and isinstance(val, str):
        return val.lower() in ("1", "yes", "true", "on")
    return ftype(val)

@classmethod
def from_dict(cls, obj = {}):
    '''
    Return instance of dataclass from dict-like POD.
    '''
    dat = {f.name: field_value(f, obj) for f in dataclasses.fields(cls)}
    return cls(**dat)

def to_dict(self):
    '''
    Try hard to return a dataclass as a dict of POD.
    '''
    return dataclasses.asdict(self, dict_factory=dict_factory)

def dataclass_dictify(cls):
    '''
    Decorate a dataclass to add from_dict(cls) and to_dict(self) methods.
    '''
    cls.from_dict = from_dict
    cls.to_dict = to_dict
    return cls

class JsonEncoder(json.JSONEncoder):

    def default(self, obj):
        if isinstance(obj, numpy.integer):
            return int(obj)
        if isinstance(obj, numpy.floating):
            return float(obj)
        if isinstance(obj, numpy.ndarray):
            return obj.tolist()
        if dataclasses.is_dataclass(obj):
            return dataclasses.asdict(obj, dict_factory=dict_factory)
        return super().default(obj)


def json_dumps(obj, **kwds):
    return json.dumps(obj, cls=JsonEncoder, **kwds)
