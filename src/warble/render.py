"""Render/expansion engine — component name + raw attributes to HTML and CSS.

``render_component()`` looks up the component, parses its attributes,
calls the render function with ``api`` and ``classes``, and then scans
the produced HTML for tags naming other registered components::

    <counter step="5"></counter>
    <todo-item id="3" done />

Each such tag (self-closing or paired; the paired form's inner content is
discarded) is replaced in place by the recursive render of that
component. Everything else in the HTML is preserved byte for byte.

Guards:

- A component whose name is already on the active expansion path is not
  expanded again; a ``<!-- warble:cycle NAME -->`` marker takes its place.
- Nesting deeper than ``RenderConfig.max_depth`` stops with a
  ``<!-- warble:depth-limit NAME -->`` marker and a warning.

Request-class failures (``PropertyTypeError``, ``PropertyTransformError``,
``UnknownComponentError``, ``SchemaInferenceError``) abort only the failing
branch and are collected on the ``RenderResult``. Configuration errors
raised by render code (e.g. ``RouteArityError``) propagate.
"""

import html
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from warble.errors import (
    ComponentError,
    ConfigurationError,
    PropertyTransformError,
    PropertyTypeError,
)
from warble.markup import to_html
from warble.props import call_render, parse_props
from warble.registry import CompiledComponent, Registry, default_registry
from warble.templating import InlineTemplate, render_inline

logger = logging.getLogger("warble.render")

# One attribute: name, optionally = "double" | 'single' | unquoted
_ATTR_SOURCE = r"""[^\s=/>"']+(?:\s*=\s*(?:"[^"]*"|'[^']*'|(?:[^\s"'=<>`/]|/(?!>))+))?"""
_ATTR_PATTERN = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|((?:[^\s"'=<>`/]|/(?!>))+)))?"""
)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """HTML and CSS for one top-level render, plus collected diagnostics.

    ``components`` lists every component rendered, in first-render order;
    ``css`` holds each of their style blocks once.
    """

    html: str
    css: str
    errors: tuple[ComponentError, ...] = ()
    warnings: tuple[str, ...] = ()
    components: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Re-raise the first collected error, if any."""
        if self.errors:
            raise self.errors[0]

    def __html__(self) -> str:
        return self.html

    def __str__(self) -> str:
        return self.html


@dataclass(slots=True)
class ExpansionContext:
    """Per-call expansion state. Never shared between render calls."""

    max_depth: int
    path: list[str] = field(default_factory=list)
    touched: dict[str, CompiledComponent] = field(default_factory=dict)
    errors: list[ComponentError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)


def render_component(
    name: str,
    attributes: Mapping[str, Any] | None = None,
    *,
    registry: Registry | None = None,
) -> RenderResult:
    """Render component *name* with raw string *attributes*.

    Never raises ``ComponentError``: a failing top-level component yields
    an empty ``html`` with the error in ``errors``.
    """
    if registry is None:
        registry = default_registry()
    ctx = ExpansionContext(max_depth=registry.config.max_depth)

    try:
        markup = _render(registry, name, attributes or {}, ctx)
    except ComponentError as exc:
        _collect(ctx, exc)
        markup = _failure_marker(registry, name, exc)

    css = registry.config.css_separator.join(
        c.styles.css for c in ctx.touched.values() if c.styles.css
    )
    return RenderResult(
        html=markup,
        css=css,
        errors=tuple(ctx.errors),
        warnings=tuple(ctx.warnings),
        components=tuple(ctx.touched),
    )


def _render(
    registry: Registry,
    name: str,
    attributes: Mapping[str, Any],
    ctx: ExpansionContext,
) -> str:
    compiled = registry.compiled(name)
    definition = compiled.definition

    if compiled.schema is None:
        props = _transform(name, definition.transform, attributes)
    else:
        props = parse_props(name, compiled.schema, attributes)

    output = call_render(
        definition.render,
        compiled.schema,
        props,
        compiled.api,
        compiled.classes,
        legacy=definition.is_legacy,
    )
    if isinstance(output, InlineTemplate):
        markup = render_inline(
            registry.env, output, compiled.api, compiled.classes, props=props
        )
    else:
        markup = to_html(output)

    ctx.touched.setdefault(name, compiled)
    ctx.path.append(name)
    try:
        return expand(registry, markup, ctx)
    finally:
        ctx.path.pop()


def _transform(
    name: str,
    transform: Callable[[Mapping[str, Any]], Mapping[str, Any]] | None,
    attributes: Mapping[str, Any],
) -> dict[str, Any]:
    if transform is None:
        return {}
    try:
        return dict(transform(attributes))
    except (ComponentError, ConfigurationError):
        raise
    except Exception as exc:
        raise PropertyTransformError(name, exc) from exc


def expand(registry: Registry, markup: str, ctx: ExpansionContext) -> str:
    """Replace every registered custom tag in *markup* with its rendering.

    Substituted output is already fully expanded by the recursive call,
    so scanning resumes after it.
    """
    names = registry.names
    if not names or "<" not in markup:
        return markup

    pattern = _start_tag_pattern(tuple(sorted(names)))
    out: list[str] = []
    pos = 0

    while True:
        m = pattern.search(markup, pos)
        if m is None:
            break
        tag = m.group("name")
        end = m.end()
        if not m.group("selfclose"):
            close = _find_close(markup, tag, end)
            if close is not None:
                end = close

        out.append(markup[pos : m.start()])
        out.append(_expand_tag(registry, tag, m.group("attrs"), markup[m.start() : end], ctx))
        pos = end

    out.append(markup[pos:])
    return "".join(out)


def parse_tag_attributes(source: str) -> dict[str, str]:
    """Extract raw ``name -> value`` pairs from the attribute text of a tag.

    Bare attributes get ``""``; character references are decoded.
    """
    attrs: dict[str, str] = {}
    for m in _ATTR_PATTERN.finditer(source):
        raw = next((g for g in m.groups()[1:] if g is not None), "")
        attrs[m.group(1)] = html.unescape(raw)
    return attrs


def _expand_tag(
    registry: Registry,
    name: str,
    attr_source: str,
    original: str,
    ctx: ExpansionContext,
) -> str:
    config = registry.config

    if name in ctx.path:
        ctx.warn(f"Cycle: <{name}> inside {' > '.join(ctx.path)}; not expanded")
        return f"<!-- warble:cycle {name} -->" if config.cycle_markers else original

    if len(ctx.path) >= ctx.max_depth:
        ctx.warn(f"Depth limit {ctx.max_depth} reached at <{name}>; not expanded")
        return f"<!-- warble:depth-limit {name} -->"

    try:
        return _render(registry, name, parse_tag_attributes(attr_source), ctx)
    except ComponentError as exc:
        _collect(ctx, exc)
        return _failure_marker(registry, name, exc)


def _collect(ctx: ExpansionContext, exc: ComponentError) -> None:
    where = " > ".join([*ctx.path, exc.component])
    if isinstance(exc, PropertyTypeError):
        logger.warning("%s: %s (property %s)", where, exc, exc.prop)
    else:
        logger.warning("%s: %s", where, exc)
    ctx.errors.append(exc)


def _failure_marker(registry: Registry, name: str, exc: ComponentError) -> str:
    if not registry.config.debug:
        return ""
    detail = str(exc).replace("--", "- -")
    return f"<!-- warble:error {name}: {detail} -->"


@lru_cache(maxsize=64)
def _start_tag_pattern(names: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "todo-item" wins over "todo"
    alternation = "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))
    return re.compile(
        rf"<(?P<name>{alternation})(?=[\s/>])"
        rf"(?P<attrs>(?:\s+{_ATTR_SOURCE})*)\s*(?P<selfclose>/?)>"
    )


@lru_cache(maxsize=256)
def _tag_token_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"<(?P<closing>/?){re.escape(name)}(?=[\s/>])"
        rf"(?:\s+{_ATTR_SOURCE})*\s*(?P<selfclose>/?)>"
    )


def _find_close(markup: str, name: str, start: int) -> int | None:
    """Index just past the ``</name>`` balancing the tag opened before *start*."""
    depth = 1
    for m in _tag_token_pattern(name).finditer(markup, start):
        if m.group("closing"):
            depth -= 1
            if depth == 0:
                return m.end()
        elif not m.group("selfclose"):
            depth += 1
    return None
