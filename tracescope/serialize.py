"""Serialization-safe deep clone used for snapshots and JSON output.

Each value kind has an explicit rule:

* ``None``, ``bool``, ``str``: unchanged
* ``int``: unchanged inside the JSON-safe range, decimal string outside it
* ``float``: unchanged; NaN and infinities become ``None``
* ``bytes``: ``0x``-prefixed hex
* ``Enum``: its value, cloned
* mappings: ``dict`` with string keys; entries whose value is dropped are omitted
* lists, tuples, sets: ``list``; dropped members become ``None``
* pydantic models, objects with ``to_dict()``, dataclass instances: their
  field mapping, cloned
* anything else (functions, bound methods, open handles, ...): dropped

A container or object that contains itself is dropped at the point of
recursion, and an object whose ``to_dict()`` or ``model_dump()`` raises is
dropped.
The result never shares mutable structure with the input.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

from . import constants

logger = logging.getLogger(__name__)

_DROP = object()


def safe_clone(value: Any) -> Any:
    """Return a detached, JSON-safe copy of *value* (``None`` if it is dropped entirely)."""
    cloned = _clone(value, set())
    return None if cloned is _DROP else cloned


def _clone(v: Any, active: set[int]) -> Any:
    if isinstance(v, Enum):
        return _clone(v.value, active)
    if v is None or isinstance(v, (bool, str)):
        return v
    if isinstance(v, int):
        if -constants.MAX_SAFE_INTEGER <= v <= constants.MAX_SAFE_INTEGER:
            return v
        return str(v)
    if isinstance(v, float):
        return v if math.isfinite(v) else None
    if isinstance(v, (bytes, bytearray)):
        return constants.HEX_PREFIX + bytes(v).hex()

    if isinstance(v, type):
        return _DROP
    if not isinstance(v, (Mapping, list, tuple, set, frozenset)) and not _is_record(v):
        return _DROP

    if id(v) in active:
        return _DROP
    active.add(id(v))
    try:
        if isinstance(v, Mapping):
            return _clone_mapping(v, active)
        if isinstance(v, (list, tuple, set, frozenset)):
            return _clone_sequence(v, active)
        fields = _record_fields(v)
        return _DROP if fields is _DROP else _clone(fields, active)
    finally:
        active.discard(id(v))


def _is_record(v: Any) -> bool:
    return (
        isinstance(v, BaseModel)
        or callable(getattr(v, "to_dict", None))
        or dataclasses.is_dataclass(v)
    )


def _record_fields(v: Any) -> Any:
    """Field mapping of a model, ``to_dict()`` object or dataclass; ``_DROP`` if it raises."""
    try:
        if isinstance(v, BaseModel):
            return v.model_dump()
        to_dict = getattr(v, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return {f.name: getattr(v, f.name) for f in dataclasses.fields(v)}
    except Exception as exc:
        logger.debug("Dropping unserializable %s: %s", type(v).__name__, exc)
        return _DROP


def _clone_mapping(v: Mapping, active: set[int]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, item in v.items():
        cloned = _clone(item, active)
        if cloned is not _DROP:
            out[_key(key)] = cloned
    return out


def _clone_sequence(v: Any, active: set[int]) -> list[Any]:
    out: list[Any] = []
    for item in v:
        cloned = _clone(item, active)
        out.append(None if cloned is _DROP else cloned)
    return out


def _key(k: Any) -> str:
    """Stringify a mapping key the way a JSON encoder would."""
    if isinstance(k, Enum):
        k = k.value
    if isinstance(k, str):
        return k
    if isinstance(k, bool):
        return "true" if k else "false"
    if k is None:
        return "null"
    return str(k)
