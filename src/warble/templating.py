"""Template-based components — kida rendering for inline templates.

A render function may return an ``InlineTemplate`` instead of an ``h()``
tree::

    def greeting(api, classes, *, name=string("World")):
        return InlineTemplate(
            '<p class="{{ classes.text }}">Hello {{ name }}</p>', name=name
        )

The template context always contains ``props`` (the parsed property
values), ``api`` and ``classes``; keyword arguments given to
``InlineTemplate`` are added on top. The ``attrs`` filter renders an
attribute mapping such as ``{{ api.toggle(id) | attrs }}``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kida import Environment
from kida.utils.html import Markup

from warble.config import RenderConfig
from warble.markup import render_attrs


@dataclass(frozen=True, slots=True)
class InlineTemplate:
    """A kida template rendered from a string source."""

    source: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, source: str, /, **context: Any) -> None:
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "context", context)


def attrs(value: Mapping[str, Any] | None) -> Markup:
    """Render an attribute mapping, e.g. the result of ``api.remove(id)``.

    Example:
        <button{{ api.remove(id) | attrs }}>x</button>
        → <button hx-delete="/api/todos/1">x</button>
    """
    if not value:
        return Markup("")
    return Markup(render_attrs(value))


BUILTIN_FILTERS: dict[str, Any] = {
    "attrs": attrs,
}


def create_environment(config: RenderConfig) -> Environment:
    """Create the kida Environment used for inline templates.

    Called once per ``Registry``. The returned environment is immutable
    for the lifetime of the registry.
    """
    env = Environment(autoescape=config.autoescape)
    env.update_filters(BUILTIN_FILTERS)
    return env


def render_inline(
    env: Environment,
    tpl: InlineTemplate,
    api: Any,
    classes: Any,
    props: Mapping[str, Any] | None = None,
) -> str:
    """Render an inline template with ``props``, ``api`` and ``classes`` in scope."""
    template = env.from_string(tpl.source)
    return template.render(
        {"props": dict(props or {}), "api": api, "classes": classes, **tpl.context}
    )
