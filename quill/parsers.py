"""
Quill Parsers — decode text back into mappings for ``set_attributes``.

- **JSONParser** — ``application/json``
- **XMLParser** — ``application/xml`` (the format written by ``XMLRenderer``)
- **YAMLParser** — ``application/x-yaml``

Decoding errors are raised as ``SerializationFault`` with code
``PARSE_ERROR`` and the original exception chained.
"""

from __future__ import annotations

import decimal
import json
import logging
from typing import Any, Dict, Optional, Union

import yaml
from lxml import etree

from .faults import FaultDomain
from .serializers.exceptions import SerializationFault

logger = logging.getLogger("quill.parsers")

__all__ = [
    "BaseParser",
    "JSONParser",
    "XMLParser",
    "YAMLParser",
]


def _parse_error(fmt: str, exc: Exception) -> SerializationFault:
    return SerializationFault(
        code="PARSE_ERROR",
        message=f"Could not decode {fmt} payload: {exc}",
        domain=FaultDomain.IO,
        metadata={"format": fmt},
    )


def _ensure_mapping(fmt: str, value: Any) -> Optional[Dict[str, Any]]:
    if value is None or isinstance(value, dict):
        return value
    raise SerializationFault(
        code="PARSE_ERROR",
        message=f"Expected a {fmt} object at the top level, got {type(value).__name__}",
        domain=FaultDomain.IO,
        metadata={"format": fmt},
    )


class BaseParser:
    """Abstract parser. Subclasses implement ``parse()``."""

    media_type: str = "application/octet-stream"
    format_suffix: str = ""

    def parse(self, text: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError


class JSONParser(BaseParser):
    media_type = "application/json"
    format_suffix = "json"

    def parse(self, text: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        try:
            value = json.loads(text)
        except (ValueError, TypeError) as exc:
            raise _parse_error("JSON", exc) from exc
        return _ensure_mapping("JSON", value)


class YAMLParser(BaseParser):
    media_type = "application/x-yaml"
    format_suffix = "yaml"

    def parse(self, text: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise _parse_error("YAML", exc) from exc
        return _ensure_mapping("YAML", value)


class XMLParser(BaseParser):
    """
    Parse XML into ``{root_tag: value}``.

    Elements with children become dicts (repeated child tags collect into
    a list), ``type="array"`` elements become lists, ``nil="true"`` becomes
    ``None`` and ``type`` attributes restore integers, floats, decimals and
    booleans. Entity resolution and network access are disabled.
    """

    media_type = "application/xml"
    format_suffix = "xml"

    def parse(self, text: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        if isinstance(text, str):
            text = text.encode("utf-8")
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
        try:
            root = etree.fromstring(text, parser)
        except etree.XMLSyntaxError as exc:
            raise _parse_error("XML", exc) from exc
        return {etree.QName(root).localname: self._element_value(root)}

    def _element_value(self, element: Any) -> Any:
        if element.get("nil") == "true":
            return None

        kind = element.get("type")
        children = [c for c in element if isinstance(c.tag, str)]

        if kind == "array":
            return [self._element_value(child) for child in children]

        if children or kind == "hash":
            result: Dict[str, Any] = {}
            repeated = set()
            for child in children:
                key = etree.QName(child).localname
                value = self._element_value(child)
                if key not in result:
                    result[key] = value
                elif key in repeated:
                    result[key].append(value)
                else:
                    result[key] = [result[key], value]
                    repeated.add(key)
            return result

        return self._coerce(element.text or "", kind)

    def _coerce(self, text: str, kind: Optional[str]) -> Any:
        try:
            if kind == "integer":
                return int(text.strip())
            if kind == "float":
                return float(text.strip())
            if kind == "decimal":
                return decimal.Decimal(text.strip())
        except (ValueError, decimal.InvalidOperation) as exc:
            raise _parse_error("XML", exc) from exc
        if kind == "boolean":
            return text.strip().lower() in ("true", "1")
        if kind is not None and kind != "string":
            logger.debug("Unknown XML type attribute %r, keeping text", kind)
        return text
