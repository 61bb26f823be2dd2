"""Component registry — definitions and their compiled artifacts.

Mutable during setup (``define()`` calls at import time), read-only while
rendering. Each definition is compiled once at registration: the property
schema is inferred (with a single dry-run render), styles are compiled to
a ``ClassMap``, and API routes to an ``ApiMap``. Re-registering a name
replaces the definition and its compiled artifacts wholesale.

Thread safety:
    Registration holds ``_lock``. Compiled entries are frozen dataclasses
    stored in a single dict assignment, so readers never observe a
    partially-built entry. The shared ``Router`` is built on first use with
    double-checked locking.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from kida import Environment

from warble._internal.types import RenderFunc, Transform
from warble.config import RenderConfig
from warble.errors import ConfigurationError, UnknownComponentError
from warble.props import PropertySchema, declared_schema, infer_schema, verify_render
from warble.routing.api import ApiMap, compile_routes
from warble.routing.route import CompiledRoute, RouteSpec
from warble.routing.router import Router
from warble.styles import CompiledStyles, compile_styles
from warble.templating import create_environment

if TYPE_CHECKING:
    from warble.render import RenderResult

logger = logging.getLogger("warble.registry")

_COMPONENT_NAME = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")


@dataclass(frozen=True, slots=True)
class ComponentDefinition:
    """A registered component. Immutable once registered.

    ``props`` (explicit schema) and ``transform`` (raw attributes to
    typed properties) are the legacy alternatives to signature inference;
    at most one may be set.
    """

    name: str
    render: RenderFunc
    styles: Mapping[str, str] = field(default_factory=dict)
    api: Mapping[str, RouteSpec] = field(default_factory=dict)
    props: Mapping[str, Any] | None = None
    transform: Transform | None = None

    @property
    def is_legacy(self) -> bool:
        return self.props is not None or self.transform is not None


@dataclass(frozen=True, slots=True)
class CompiledComponent:
    """A definition plus everything derived from it.

    ``schema`` is ``None`` for components using a legacy ``transform``.
    """

    definition: ComponentDefinition
    schema: PropertySchema | None
    styles: CompiledStyles
    routes: tuple[CompiledRoute, ...]
    api: ApiMap

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def classes(self) -> Any:
        return self.styles.classes


def compile_component(definition: ComponentDefinition, config: RenderConfig) -> CompiledComponent:
    """Derive schema, class map, and API map for *definition*.

    Raises ``SchemaInferenceError``, ``StyleCompileError``, or
    ``ConfigurationError`` for miswritten components.
    """
    name = definition.name
    styles = compile_styles(name, definition.styles, config.css_separator)
    routes, api = compile_routes(name, definition.api)

    if definition.transform is not None:
        schema = None
    elif definition.props is not None:
        schema = declared_schema(name, definition.props)
    else:
        schema = infer_schema(name, definition.render)
        verify_render(name, definition.render, schema, api, styles.classes)

    return CompiledComponent(
        definition=definition,
        schema=schema,
        styles=styles,
        routes=routes,
        api=api,
    )


class Registry:
    """Process-wide table of component definitions.

    Usage::

        registry = Registry()

        @registry.component("counter", styles={"display": "{ font-weight: bold; }"})
        def counter(classes, *, step=number(1)):
            return h("span", {"class": classes.display}, step)

        result = registry.render("counter", {"step": "5"})
    """

    __slots__ = ("_compiled", "_env", "_lock", "_router", "config")

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config: RenderConfig = config or RenderConfig()
        self._compiled: dict[str, CompiledComponent] = {}
        self._lock = threading.Lock()
        self._router: Router | None = None
        self._env: Environment = create_environment(self.config)

    # -- Registration --

    def define(
        self,
        name: str,
        render: RenderFunc,
        *,
        styles: Mapping[str, str] | None = None,
        api: Mapping[str, RouteSpec] | None = None,
        props: Mapping[str, Any] | None = None,
        transform: Transform | None = None,
    ) -> ComponentDefinition:
        """Register (or replace) a component and compile it.

        Raises ``ConfigurationError`` (or a subclass) if the name is not
        kebab-case or the component cannot be compiled.
        """
        if not _COMPONENT_NAME.match(name):
            msg = f"Component name {name!r} must be a kebab-case identifier, e.g. 'todo-item'."
            raise ConfigurationError(msg)
        if not callable(render):
            msg = f"render for component {name!r} is not callable."
            raise ConfigurationError(msg)
        if props is not None and transform is not None:
            msg = f"Component {name!r} declares both props and transform; use one."
            raise ConfigurationError(msg)

        definition = ComponentDefinition(
            name=name,
            render=render,
            styles=dict(styles or {}),
            api=dict(api or {}),
            props=dict(props) if props is not None else None,
            transform=transform,
        )
        compiled = compile_component(definition, self.config)

        with self._lock:
            replaced = name in self._compiled
            self._compiled = {**self._compiled, name: compiled}
            self._router = None

        logger.debug(
            "%s component %r (%d props, %d styles, %d routes)",
            "Replaced" if replaced else "Registered",
            name,
            len(compiled.schema) if compiled.schema is not None else 0,
            len(compiled.classes),
            len(compiled.routes),
        )
        return definition

    def component(
        self,
        name: str,
        *,
        styles: Mapping[str, str] | None = None,
        api: Mapping[str, RouteSpec] | None = None,
        props: Mapping[str, Any] | None = None,
        transform: Transform | None = None,
    ) -> Callable[[RenderFunc], RenderFunc]:
        """Decorator form of ``define()``. Returns the render function unchanged."""

        def decorator(func: RenderFunc) -> RenderFunc:
            self.define(name, func, styles=styles, api=api, props=props, transform=transform)
            return func

        return decorator

    def clear(self) -> None:
        """Drop every registered component."""
        with self._lock:
            self._compiled = {}
            self._router = None

    # -- Lookup --

    def get(self, name: str) -> ComponentDefinition:
        """Return the definition for *name*. Raises ``UnknownComponentError``."""
        return self.compiled(name).definition

    def compiled(self, name: str) -> CompiledComponent:
        """Return the compiled component for *name*. Raises ``UnknownComponentError``."""
        try:
            return self._compiled[name]
        except KeyError:
            raise UnknownComponentError(name) from None

    @property
    def names(self) -> tuple[str, ...]:
        """Registered component names, in registration order."""
        return tuple(self._compiled)

    @property
    def env(self) -> Environment:
        """kida Environment for template-based components."""
        return self._env

    def __contains__(self, name: object) -> bool:
        return name in self._compiled

    def __len__(self) -> int:
        return len(self._compiled)

    # -- Routing --

    def router(self) -> Router:
        """Router over every component's routes, in registration order.

        Built on first use and cached until the next registration.
        """
        router = self._router
        if router is not None:
            return router
        with self._lock:
            if self._router is not None:
                return self._router
            router = Router()
            for compiled in self._compiled.values():
                for route in compiled.routes:
                    router.add(route)
            router.compile()
            self._router = router
            return router

    # -- Rendering --

    def render(self, name: str, attributes: Mapping[str, Any] | None = None) -> RenderResult:
        """Render *name* with raw *attributes*. See ``warble.render``."""
        from warble.render import render_component

        return render_component(name, attributes, registry=self)


_default_registry = Registry()


def default_registry() -> Registry:
    """The process-wide registry used by the module-level helpers."""
    return _default_registry


def define_component(
    name: str,
    render: RenderFunc | None = None,
    *,
    styles: Mapping[str, str] | None = None,
    api: Mapping[str, RouteSpec] | None = None,
    props: Mapping[str, Any] | None = None,
    transform: Transform | None = None,
    registry: Registry | None = None,
) -> Any:
    """Register a component on *registry* (default: the process-wide one).

    Works as a call or a decorator::

        define_component("badge", badge, styles={...})

        @define_component("badge", styles={...})
        def badge(classes, *, label=string("new")): ...
    """
    target = _default_registry if registry is None else registry
    if render is None:
        return target.component(name, styles=styles, api=api, props=props, transform=transform)
    return target.define(name, render, styles=styles, api=api, props=props, transform=transform)
