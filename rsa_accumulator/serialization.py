"""
Serialization of group parameters, proofs and decompositions.

Integers travel as decimal strings (signed values allowed), raw bytes as
base64. Every object round-trips through ``to_json`` / ``from_json``.
"""

import base64
import dataclasses
import json
from typing import Any, Dict, List, Sequence

from .bigint import bytes_to_int, int_to_bytes
from .errors import PreconditionViolation
from .groups import GroupSetup
from .proofs import IntervalProof, NonNegativeProof, PoEProof, PoKEStarProof, ZKPoKEProof
from .squares import FourInt, ThreeInt

__all__ = ['int_to_bytes', 'bytes_to_int', 'serialize_int', 'deserialize_int',
           'serialize_ints', 'deserialize_ints', 'serialize', 'deserialize',
           'to_json', 'from_json']

_TYPES = {cls.__name__: cls for cls in (GroupSetup, PoEProof, PoKEStarProof, ZKPoKEProof,
                                         NonNegativeProof, IntervalProof)}
_TUPLES = {cls.__name__: cls for cls in (FourInt, ThreeInt)}


def serialize_int(x: int) -> str:
    return str(int(x))


def deserialize_int(data: str) -> int:
    try:
        return int(data, 10)
    except (TypeError, ValueError) as e:
        raise PreconditionViolation(f"Not a decimal integer: {data!r}") from e


def serialize_ints(values: Sequence[int]) -> List[str]:
    return [serialize_int(v) for v in values]


def deserialize_ints(data: Sequence[str]) -> List[int]:
    return [deserialize_int(d) for d in data]


def _encode_value(value):
    if isinstance(value, bytes):
        return {'b64': base64.b64encode(value).decode('utf-8')}
    if isinstance(value, int):
        return serialize_int(value)
    if isinstance(value, tuple):
        return [_encode_value(v) for v in value]
    if dataclasses.is_dataclass(value):
        return serialize(value)
    raise PreconditionViolation(f"Cannot serialize value of type {type(value).__name__}")


def _decode_value(data):
    if isinstance(data, str):
        return deserialize_int(data)
    if isinstance(data, list):
        return tuple(_decode_value(d) for d in data)
    if isinstance(data, dict) and 'b64' in data:
        return base64.b64decode(data['b64'])
    if isinstance(data, dict) and 'type' in data:
        return deserialize(data)
    raise PreconditionViolation(f"Cannot deserialize {data!r}")


def serialize(obj) -> Dict[str, Any]:
    """Serialize a GroupSetup, a proof object, a FourInt or a ThreeInt to a dict."""
    name = type(obj).__name__
    if name in _TUPLES and isinstance(obj, _TUPLES[name]):
        return {'type': name, 'values': serialize_ints(obj)}
    if name not in _TYPES:
        raise PreconditionViolation(f"Unsupported type {name}")
    data = {'type': name}
    for field in dataclasses.fields(obj):
        data[field.name] = _encode_value(getattr(obj, field.name))
    return data


def deserialize(data: Dict[str, Any]):
    name = data.get('type')
    if name in _TUPLES:
        return _TUPLES[name](*deserialize_ints(data['values']))
    if name not in _TYPES:
        raise PreconditionViolation(f"Unsupported type {name!r}")
    cls = _TYPES[name]
    kwargs = {f.name: _decode_value(data[f.name]) for f in dataclasses.fields(cls)}
    return cls(**kwargs)


def to_json(obj) -> str:
    return json.dumps(serialize(obj), sort_keys=True)


def from_json(text: str):
    return deserialize(json.loads(text))
