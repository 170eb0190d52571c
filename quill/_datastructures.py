"""
Core data structures for Quill serialization output.

Provides:
- FieldMap: ordered output mapping with key-type-insensitive lookup
- to_plain: convert FieldMap trees into plain dicts and lists
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple, Union


def _key(key: Any) -> Any:
    if isinstance(key, Enum):
        return str(key.value)
    if isinstance(key, str):
        return key
    if isinstance(key, (bytes, bytearray)):
        return key.decode("utf-8")
    return key


# ============================================================================
# FieldMap
# ============================================================================

class FieldMap(dict):
    """
    Ordered serializer output.

    Keys are stored as declared and iterate in insertion order. Lookups
    accept the string form of a key as well, so ``m["field_1"]``,
    ``m[Key.FIELD_1]`` (a str-valued Enum) and ``m[b"field_1"]`` all find
    the same entry.
    """

    def __init__(self, items: Optional[Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]] = None, **kwargs: Any):
        super().__init__()
        if items is not None:
            self.update(items)
        if kwargs:
            self.update(kwargs)

    def _resolve(self, key: Any) -> Any:
        if dict.__contains__(self, key):
            return key
        normalized = _key(key)
        if dict.__contains__(self, normalized):
            return normalized
        for existing in dict.keys(self):
            if _key(existing) == normalized:
                return existing
        return key

    def __getitem__(self, key: Any) -> Any:
        return dict.__getitem__(self, self._resolve(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        dict.__setitem__(self, self._resolve(key), value)

    def __delitem__(self, key: Any) -> None:
        dict.__delitem__(self, self._resolve(key))

    def __contains__(self, key: Any) -> bool:
        return dict.__contains__(self, self._resolve(key))

    def get(self, key: Any, default: Any = None) -> Any:
        return dict.get(self, self._resolve(key), default)

    def pop(self, key: Any, *args: Any) -> Any:
        return dict.pop(self, self._resolve(key), *args)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        return dict.setdefault(self, self._resolve(key), default)

    def update(self, *args: Any, **kwargs: Any) -> None:
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def copy(self) -> "FieldMap":
        return FieldMap(self)

    def to_dict(self) -> dict:
        """Return a plain ``dict`` (recursively)."""
        return to_plain(self)

    def __repr__(self) -> str:
        return f"FieldMap({dict.__repr__(self)})"


def to_plain(value: Any) -> Any:
    """Change FieldMaps (and other mappings) into plain dicts, recursively."""
    if isinstance(value, Mapping):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
