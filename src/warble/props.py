"""Typed component properties — markers, schema inference, and parsing.

A component declares its properties as render-function parameters whose
defaults are marker calls::

    def counter(api, classes, *, initial_count=number(0), step=number(1)):
        ...

``infer_schema()`` reads those parameters once (in declaration order) and
``verify_render()`` performs a single dry-run call with every default
filled in, so a render function that cannot evaluate its own defaults
fails at registration instead of on the first request.

Parsing rules for raw attribute text:

- **string**: passed through verbatim
- **number**: ``int`` or ``float``; anything else is a ``PropertyTypeError``
- **boolean**: presence-based — any value, even ``""``, means ``True``
- **array / object**: JSON; unparseable or mistyped text falls back to the default
"""

import copy
import inspect
import json
import logging
import math
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from warble.errors import ConfigurationError, PropertyTypeError, SchemaInferenceError

logger = logging.getLogger("warble.render")

PropKind = Literal["string", "number", "boolean", "array", "object"]

# Parameter names filled by the renderer rather than by attributes
INJECTED: frozenset[str] = frozenset({"api", "classes"})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Prop:
    """A typed default, produced by one of the marker functions."""

    kind: PropKind
    default: Any


def string(default: str = "") -> Any:
    """Declare a text property."""
    return Prop("string", default)


def number(default: int | float = 0) -> Any:
    """Declare a numeric property. Non-numeric attribute text is rejected."""
    return Prop("number", default)


def boolean(default: bool = False) -> Any:
    """Declare a presence-based flag."""
    return Prop("boolean", default)


def array(default: list[Any] | tuple[Any, ...] | None = None) -> Any:
    """Declare a JSON array property."""
    return Prop("array", list(default) if default is not None else [])


def obj(default: Mapping[str, Any] | None = None) -> Any:
    """Declare a JSON object property."""
    return Prop("object", dict(default) if default is not None else {})


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PropSpec:
    """One inferred or declared property."""

    name: str
    kind: PropKind
    default: Any


@dataclass(frozen=True, slots=True)
class PropertySchema:
    """Ordered property table for one component.

    ``injected`` lists the renderer-supplied parameters (``api``,
    ``classes``) the render function accepts by name.
    """

    props: tuple[PropSpec, ...] = ()
    injected: frozenset[str] = frozenset()

    def __iter__(self) -> Iterator[PropSpec]:
        return iter(self.props)

    def __len__(self) -> int:
        return len(self.props)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.props)

    def get(self, name: str) -> PropSpec | None:
        for spec in self.props:
            if spec.name == name:
                return spec
        return None

    def defaults(self) -> dict[str, Any]:
        """Fresh default values, mutable defaults copied."""
        return {p.name: copy.deepcopy(p.default) for p in self.props}


def attr_to_prop(name: str) -> str:
    """Normalize an attribute name to a property name.

    ``initial-count``, ``initialCount`` and ``initial_count`` all become
    ``initial_count``.
    """
    return _CAMEL_BOUNDARY.sub(r"_\1", name).replace("-", "_").lower()


def infer_schema(component: str, render: Callable[..., Any]) -> PropertySchema:
    """Derive the property schema from a render function's signature.

    Every parameter other than ``api``/``classes`` is a property and must
    carry a default: a marker call or a plain ``str``/``int``/``float``/
    ``bool``/``list``/``dict`` literal.
    """
    try:
        sig = inspect.signature(render)
    except (TypeError, ValueError) as exc:
        raise SchemaInferenceError(component, f"render is not introspectable ({exc})") from exc

    specs: list[PropSpec] = []
    injected: set[str] = set()
    accepts_extra = False

    for name, param in sig.parameters.items():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            accepts_extra = True
            continue
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            continue
        if name in INJECTED:
            injected.add(name)
            continue
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise SchemaInferenceError(
                component, f"parameter {name!r} is positional-only; properties are passed by name"
            )
        if param.default is inspect.Parameter.empty:
            raise SchemaInferenceError(
                component,
                f"parameter {name!r} has no default; declare it as e.g. {name}=string('')",
            )
        specs.append(_spec_from_default(component, name, param.default))

    if accepts_extra:
        injected |= INJECTED
    return PropertySchema(props=tuple(specs), injected=frozenset(injected))


def declared_schema(component: str, props: Mapping[str, Any]) -> PropertySchema:
    """Build a schema from an explicit ``{name: marker}`` mapping."""
    specs = tuple(
        _spec_from_default(component, attr_to_prop(name), default)
        for name, default in props.items()
    )
    return PropertySchema(props=specs)


def _spec_from_default(component: str, name: str, default: Any) -> PropSpec:
    if isinstance(default, Prop):
        return PropSpec(name=name, kind=default.kind, default=default.default)
    # bool before int: bool is an int subclass
    if isinstance(default, bool):
        return PropSpec(name=name, kind="boolean", default=default)
    if isinstance(default, (int, float)):
        return PropSpec(name=name, kind="number", default=default)
    if isinstance(default, str):
        return PropSpec(name=name, kind="string", default=default)
    if isinstance(default, (list, tuple)):
        return PropSpec(name=name, kind="array", default=list(default))
    if isinstance(default, dict):
        return PropSpec(name=name, kind="object", default=dict(default))
    raise SchemaInferenceError(
        component,
        f"parameter {name!r} has a default of unsupported type {type(default).__name__}",
    )


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


def call_render(
    render: Callable[..., Any],
    schema: PropertySchema | None,
    props: Mapping[str, Any],
    api: Any,
    classes: Any,
    *,
    legacy: bool = False,
) -> Any:
    """Invoke a render function with its properties and injections.

    Inferred components receive properties as keyword arguments; legacy
    components (explicit ``props`` or a ``transform``) receive
    ``(props, api, classes)``.
    """
    if legacy or schema is None:
        return render(dict(props), api, classes)
    kwargs = dict(props)
    if "api" in schema.injected:
        kwargs["api"] = api
    if "classes" in schema.injected:
        kwargs["classes"] = classes
    return render(**kwargs)


def verify_render(
    component: str,
    render: Callable[..., Any],
    schema: PropertySchema,
    api: Any,
    classes: Any,
) -> None:
    """Dry-run the render function once with every default.

    The markup is discarded. Configuration errors raised by the render
    body (e.g. a wrong ``api`` call) propagate unchanged; anything else
    becomes a ``SchemaInferenceError``.
    """
    try:
        call_render(render, schema, schema.defaults(), api, classes)
    except ConfigurationError:
        raise
    except Exception as exc:
        raise SchemaInferenceError(
            component, f"render failed with default properties ({type(exc).__name__}: {exc})"
        ) from exc


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_props(
    component: str,
    schema: PropertySchema,
    raw: Mapping[str, Any],
) -> dict[str, Any]:
    """Parse raw attributes against *schema*, filling defaults.

    Attribute names are normalized with ``attr_to_prop()``. Unknown
    attributes are ignored. Raises ``PropertyTypeError`` for bad numbers.
    """
    given = {attr_to_prop(key): value for key, value in raw.items()}
    result: dict[str, Any] = {}

    for spec in schema:
        if spec.name not in given:
            result[spec.name] = copy.deepcopy(spec.default)
            continue
        result[spec.name] = parse_value(component, spec, given[spec.name])

    unknown = given.keys() - result.keys()
    if unknown:
        logger.debug("%s: ignoring unknown attributes %s", component, sorted(unknown))
    return result


def parse_value(component: str, spec: PropSpec, raw: Any) -> Any:
    """Convert one attribute value to *spec*'s kind.

    Values that already have the target Python type (when rendering is
    driven from code rather than markup) pass through unchanged.
    """
    match spec.kind:
        case "string":
            return raw if isinstance(raw, str) else str(raw)
        case "number":
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return raw
            try:
                return _parse_number(str(raw))
            except ValueError:
                raise PropertyTypeError(component, spec.name, spec.kind, str(raw)) from None
        case "boolean":
            if isinstance(raw, bool):
                return raw
            return True
        case "array":
            return _parse_json(raw, list, spec.default)
        case "object":
            return _parse_json(raw, dict, spec.default)
    return raw


def _parse_number(text: str) -> int | float:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    value = float(text)
    if not math.isfinite(value):
        msg = f"non-finite number {text!r}"
        raise ValueError(msg)
    return value


def _parse_json(raw: Any, expected: type, default: Any) -> Any:
    if isinstance(raw, expected):
        return raw
    if isinstance(raw, tuple) and expected is list:
        return list(raw)
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return copy.deepcopy(default)
    if not isinstance(value, expected):
        return copy.deepcopy(default)
    return value
