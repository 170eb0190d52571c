"""
Field directives — normalization and merging of ``include``/``exclude``/``only``.

A normalized directive is a ``dict`` mapping a field name to either
``True`` (the directive applies to the whole field) or another normalized
directive (the directive applies to the object returned by that field).

Accepted shapes::

    normalize_field_list(None)                    # {}
    normalize_field_list("slug")                  # {"slug": True}
    normalize_field_list("venue.id")              # {"venue": {"id": True}}
    normalize_field_list({"venue.address": "city"})
    # {"venue": {"address": {"city": True}}}
    normalize_field_list(["slug", {"venue": "id"}])
    # {"slug": True, "venue": {"id": True}}
    normalize_field_list({"venue": ["id", "name"], "slug": True})
    # {"venue": {"id": True, "name": True}, "slug": True}
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import InvalidDirectiveShape

Directive = Dict[str, Union[bool, "Directive"]]

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def is_blank(value: Any) -> bool:
    """``None``, ``False``, a whitespace-only string or an empty collection."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Mapping,) + _SEQUENCE_TYPES):
        return len(value) == 0
    return False


def _path_directive(name: str, leaf: Union[bool, Directive] = True) -> Directive:
    parts = name.split(".")
    directive: Union[bool, Directive] = leaf
    for part in reversed(parts):
        directive = {part: directive}
    return directive


def normalize_field_list(field_list: Any) -> Directive:
    """
    Turn an include, exclude or only field list into a nested ``dict``.

    Normalizing an already normalized directive returns an equal ``dict``.
    Raises ``InvalidDirectiveShape`` for anything that is not ``None``,
    ``True``, a name, a sequence of names/mappings or a mapping.
    """
    if field_list is None or field_list is True:
        return {}

    if isinstance(field_list, str):
        if "." in field_list:
            return _path_directive(field_list)
        return {field_list: True}

    if isinstance(field_list, Mapping):
        result: Directive = {}
        for key, value in field_list.items():
            if not isinstance(key, str):
                raise InvalidDirectiveShape(key)
            value = True if value is True else normalize_field_list(value)
            if "." in key:
                result = merge_directives(result, _path_directive(key, value))
            else:
                result = merge_directives(result, {key: value})
        return result

    if isinstance(field_list, _SEQUENCE_TYPES):
        result = {}
        for value in field_list:
            if isinstance(value, Mapping):
                result = merge_directives(result, normalize_field_list(value))
            elif isinstance(value, str) and "." in value:
                result = merge_directives(result, _path_directive(value))
            elif isinstance(value, str):
                result[value] = True
            else:
                raise InvalidDirectiveShape(value)
        return result

    raise InvalidDirectiveShape(field_list)


def merge_directives(directive_1: Directive, directive_2: Directive) -> Directive:
    """
    Recursively merge two normalized directives.

    Keys present on one side keep that side's value. When both sides name
    a key, nested directives are merged and a bare ``True`` against a
    nested directive yields the nested directive.
    """
    result: Directive = dict(directive_1)
    for key, value_2 in directive_2.items():
        if key not in result:
            result[key] = value_2
            continue
        value_1 = result[key]
        if isinstance(value_1, dict) or isinstance(value_2, dict):
            result[key] = merge_directives(
                value_1 if isinstance(value_1, dict) else {},
                value_2 if isinstance(value_2, dict) else {},
            )
    return result


def merge_field_lists(list_1: Any, list_2: Any) -> Optional[Any]:
    """
    Merge the values of two field lists as used in include, exclude and only.

    Blank lists are the identity: merging two blank lists returns ``None``
    and merging with one blank list returns the other list unchanged.
    """
    if is_blank(list_1):
        if is_blank(list_2):
            return None
        return list_2
    if is_blank(list_2):
        return list_1
    return merge_directives(normalize_field_list(list_1), normalize_field_list(list_2))
