"""
Quill Renderers — encode serializer output to text.

Built-in renderers:

- **JSONRenderer** — ``application/json``
- **XMLRenderer** — ``application/xml``
- **YAMLRenderer** — ``application/x-yaml``

Every renderer consumes the mapping produced by ``Serializer.to_dict()``
(or any tree of dicts, lists and scalars). Defaults come from the active
``SerializerConfig``; keyword arguments override them.

Usage::

    from quill.renderers import get_renderer

    text = get_renderer("xml", root_tag="ticket").render(serializer.to_dict())
"""

from __future__ import annotations

import decimal
import html
import json
import re
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import yaml

from ._datastructures import to_plain
from .config import get_config

__all__ = [
    "BaseRenderer",
    "JSONRenderer",
    "XMLRenderer",
    "YAMLRenderer",
    "RENDERERS",
    "get_renderer",
]


# ═══════════════════════════════════════════════════════════════════════════
#  Base Renderer
# ═══════════════════════════════════════════════════════════════════════════

class BaseRenderer:
    """
    Abstract renderer.

    Subclass and set ``media_type``, ``format_suffix``, and implement
    ``render()``.
    """

    media_type: str = "application/octet-stream"
    format_suffix: str = ""          # e.g., "json", "xml"
    charset: Optional[str] = "utf-8"

    def render(self, data: Any) -> Union[str, bytes]:
        """
        Render data to the target format.

        Returns str or bytes.
        """
        raise NotImplementedError


# ═══════════════════════════════════════════════════════════════════════════
#  JSON Renderer
# ═══════════════════════════════════════════════════════════════════════════

class JSONRenderer(BaseRenderer):
    """Render data as JSON."""

    media_type = "application/json"
    format_suffix = "json"

    def __init__(self, *, indent: Optional[int] = None, ensure_ascii: Optional[bool] = None):
        config = get_config()
        self.indent = indent if indent is not None else config.json_indent
        self.ensure_ascii = ensure_ascii if ensure_ascii is not None else config.json_ensure_ascii

    def render(self, data: Any) -> str:
        def _default(o):
            if isinstance(o, (set, frozenset, tuple)):
                return list(o)
            if isinstance(o, decimal.Decimal):
                return str(o)
            if hasattr(o, "isoformat"):
                return o.isoformat()
            if hasattr(o, "to_dict"):
                return o.to_dict()
            if hasattr(o, "__dict__"):
                return {k: v for k, v in o.__dict__.items() if not k.startswith("_")}
            return str(o)

        return json.dumps(
            data,
            default=_default,
            indent=self.indent,
            ensure_ascii=self.ensure_ascii,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  XML Renderer
# ═══════════════════════════════════════════════════════════════════════════

_XML_TYPES = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "float"),
    (decimal.Decimal, "decimal"),
)


class XMLRenderer(BaseRenderer):
    """
    Render data as XML.

    The top-level mapping becomes the children of ``root_tag``. Sequences
    are tagged ``type="array"`` and hold ``item_tag`` children, ``None``
    renders as ``nil="true"`` and numbers and booleans carry a ``type``
    attribute so ``XMLParser`` can restore them.
    """

    media_type = "application/xml"
    format_suffix = "xml"

    def __init__(
        self,
        *,
        root_tag: str = "response",
        item_tag: Optional[str] = None,
        declaration: Optional[bool] = None,
    ):
        config = get_config()
        self.root_tag = _sanitize_xml_tag(root_tag)
        self.item_tag = _sanitize_xml_tag(item_tag or config.xml_item_tag)
        self.declaration = declaration if declaration is not None else config.xml_declaration

    def render(self, data: Any) -> str:
        lines: List[str] = []
        if self.declaration:
            lines.append('<?xml version="1.0" encoding="UTF-8"?>')
        self._render_element(self.root_tag, data, lines, indent=0)
        return "\n".join(lines)

    def _render_element(self, tag: str, value: Any, lines: List[str], indent: int):
        prefix = " " * indent
        if value is None:
            lines.append(f'{prefix}<{tag} nil="true"/>')
        elif isinstance(value, Mapping):
            if not value:
                lines.append(f'{prefix}<{tag} type="hash"/>')
                return
            lines.append(f"{prefix}<{tag}>")
            for k, v in value.items():
                self._render_element(_sanitize_xml_tag(str(k)), v, lines, indent + 2)
            lines.append(f"{prefix}</{tag}>")
        elif isinstance(value, (list, tuple, set, frozenset)):
            if not value:
                lines.append(f'{prefix}<{tag} type="array"/>')
                return
            lines.append(f'{prefix}<{tag} type="array">')
            for item in value:
                self._render_element(self.item_tag, item, lines, indent + 2)
            lines.append(f"{prefix}</{tag}>")
        else:
            attrs = ""
            text = str(value)
            for py_type, xml_type in _XML_TYPES:
                if isinstance(value, py_type):
                    attrs = f' type="{xml_type}"'
                    if xml_type == "boolean":
                        text = "true" if value else "false"
                    break
            lines.append(f"{prefix}<{tag}{attrs}>{html.escape(text, quote=False)}</{tag}>")


def _sanitize_xml_tag(tag: str) -> str:
    """Ensure a string is a valid XML tag name."""
    tag = re.sub(r"[^a-zA-Z0-9_.-]", "_", tag)
    if not tag or tag[0].isdigit() or tag[0] in "-.":
        tag = "_" + tag
    return tag


# ═══════════════════════════════════════════════════════════════════════════
#  YAML Renderer
# ═══════════════════════════════════════════════════════════════════════════

class YAMLRenderer(BaseRenderer):
    """Render data as YAML (``yaml.safe_dump`` over plain dicts and lists)."""

    media_type = "application/x-yaml"
    format_suffix = "yaml"

    def __init__(
        self,
        *,
        default_flow_style: Optional[bool] = None,
        allow_unicode: Optional[bool] = None,
    ):
        config = get_config()
        self.default_flow_style = (
            default_flow_style if default_flow_style is not None
            else config.yaml_default_flow_style
        )
        self.allow_unicode = allow_unicode if allow_unicode is not None else config.yaml_allow_unicode

    def render(self, data: Any) -> str:
        return yaml.safe_dump(
            to_plain(data),
            default_flow_style=self.default_flow_style,
            allow_unicode=self.allow_unicode,
            sort_keys=False,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Lookup
# ═══════════════════════════════════════════════════════════════════════════

RENDERERS: Dict[str, Type[BaseRenderer]] = {
    renderer.format_suffix: renderer
    for renderer in (JSONRenderer, XMLRenderer, YAMLRenderer)
}
RENDERERS["yml"] = YAMLRenderer


def get_renderer(format_suffix: str, **options: Any) -> BaseRenderer:
    """Build the renderer for ``"json"``, ``"xml"`` or ``"yaml"``."""
    try:
        renderer_class = RENDERERS[format_suffix.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown format {format_suffix!r}; expected one of {', '.join(sorted(RENDERERS))}"
        ) from None
    return renderer_class(**options)
