"""HTML string construction — ``h()`` and the ``Element`` tree.

Render functions build markup with ``h(tag, attrs, *children)``. The
result is a small immutable tree that serializes to an HTML string.
Custom component tags are built the same way (``h("counter", {"step": 5})``)
and resolved afterwards by the expansion engine.

Escaping rules:

- Text children and attribute values are escaped.
- kida ``Markup`` values (and anything with ``__html__``) are trusted.
- ``True`` attributes render bare, ``False`` / ``None`` are omitted.
- List, tuple and dict values are JSON-encoded (a ``class`` list is
  space-joined instead), so they survive the trip through a custom tag
  and parse back as ``array`` / ``obj`` properties.
"""

import html
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from kida.utils.html import Markup

# Elements that never have a closing tag
VOID_ELEMENTS: frozenset[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})


@dataclass(frozen=True, slots=True)
class Element:
    """A single HTML element with attributes and children.

    Created by ``h()``. Children are already-normalized nodes
    (``Element``, ``Markup``, or plain text).
    """

    tag: str
    attrs: tuple[tuple[str, Any], ...] = ()
    children: tuple[Any, ...] = ()

    def __html__(self) -> str:
        attrs = render_attrs(self.attrs)
        if self.tag in VOID_ELEMENTS:
            return f"<{self.tag}{attrs}>"
        inner = "".join(_render_child(c) for c in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def __str__(self) -> str:
        return self.__html__()


@dataclass(frozen=True, slots=True)
class Fragment:
    """Children rendered side by side without a wrapping element."""

    children: tuple[Any, ...] = ()

    def __html__(self) -> str:
        return "".join(_render_child(c) for c in self.children)

    def __str__(self) -> str:
        return self.__html__()


def h(tag: str, attrs: Mapping[str, Any] | None = None, *children: Any) -> Element:
    """Build an element.

    Usage::

        h("span", {"class": classes.display}, count)
        h("button", {"type": "button", **api.remove(item_id)}, "x")
    """
    return Element(
        tag=tag,
        attrs=tuple((attrs or {}).items()),
        children=tuple(_flatten(children)),
    )


def fragment(*children: Any) -> Fragment:
    """Group children without a wrapper element."""
    return Fragment(children=tuple(_flatten(children)))


def to_html(value: Any) -> str:
    """Serialize a render result to an HTML string.

    Accepts ``Element``/``Fragment`` trees, ``Markup`` or any object with
    ``__html__``, plain strings (treated as already-built HTML), ``None``,
    and iterables of those.
    """
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        return str(value)
    if hasattr(value, "__html__"):
        return value.__html__()
    if isinstance(value, Iterable):
        return "".join(to_html(v) for v in value)
    return str(value)


def _flatten(children: Iterable[Any]) -> Iterable[Any]:
    for child in children:
        if child is None or child is False or child is True:
            continue
        if isinstance(child, (list, tuple)) or _is_generator(child):
            yield from _flatten(child)
        elif isinstance(child, Fragment):
            yield from child.children
        else:
            yield child


def _is_generator(value: Any) -> bool:
    return hasattr(value, "__next__") and hasattr(value, "__iter__")


def _render_child(child: Any) -> str:
    if isinstance(child, Markup):
        return str(child)
    if hasattr(child, "__html__"):
        return child.__html__()
    return html.escape(str(child), quote=False)


def render_attrs(attrs: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> str:
    """Render attributes as a string with a leading space per attribute."""
    pairs = attrs.items() if isinstance(attrs, Mapping) else attrs
    parts: list[str] = []
    for name, value in pairs:
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {name}")
            continue
        if name == "class" and isinstance(value, (list, tuple)):
            value = " ".join(str(v) for v in value if v)
        if isinstance(value, Markup):
            text = str(value)
        elif isinstance(value, (list, tuple, dict)):
            text = html.escape(json.dumps(value), quote=True)
        else:
            text = html.escape(str(value), quote=True)
        parts.append(f' {name}="{text}"')
    return "".join(parts)
