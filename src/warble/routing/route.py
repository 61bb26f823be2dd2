"""RouteSpec, CompiledRoute, and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from warble._internal.types import Handler
from warble.errors import ConfigurationError

# Methods with a matching hx-* attribute
HTMX_METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/items``  (is_param=False)
    Param:   ``/:id``    (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """A declared server action: method, path pattern, handler.

    ``target`` and ``swap`` are copied into the generated client
    attributes as ``hx-target`` / ``hx-swap``.
    """

    method: str
    path: str
    handler: Handler
    target: str | None = None
    swap: str | None = None


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route bound to its component and action, with parsed segments."""

    component: str
    action: str
    spec: RouteSpec
    segments: tuple[PathSegment, ...]

    @property
    def method(self) -> str:
        return self.spec.method

    @property
    def path(self) -> str:
        return self.spec.path

    @property
    def handler(self) -> Handler:
        return self.spec.handler

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.param_name for s in self.segments if s.param_name is not None)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: CompiledRoute
    path_params: dict[str, str]


def route(
    declaration: str,
    handler: Handler,
    *,
    target: str | None = None,
    swap: str | None = None,
) -> RouteSpec:
    """Declare a route from a ``"METHOD /path/:param"`` string.

    Usage::

        api = {"toggle": route("PATCH /api/todos/:id/toggle", toggle)}
    """
    parts = declaration.split(None, 1)
    if len(parts) != 2:
        msg = f"Route declaration {declaration!r} must look like 'METHOD /path'."
        raise ConfigurationError(msg)
    method, path = parts
    return _spec(method, path.strip(), handler, target, swap)


def get(path: str, handler: Handler, *, target: str | None = None, swap: str | None = None) -> RouteSpec:
    return _spec("GET", path, handler, target, swap)


def post(path: str, handler: Handler, *, target: str | None = None, swap: str | None = None) -> RouteSpec:
    return _spec("POST", path, handler, target, swap)


def put(path: str, handler: Handler, *, target: str | None = None, swap: str | None = None) -> RouteSpec:
    return _spec("PUT", path, handler, target, swap)


def patch(path: str, handler: Handler, *, target: str | None = None, swap: str | None = None) -> RouteSpec:
    return _spec("PATCH", path, handler, target, swap)


def delete(path: str, handler: Handler, *, target: str | None = None, swap: str | None = None) -> RouteSpec:
    return _spec("DELETE", path, handler, target, swap)


def _spec(
    method: str,
    path: str,
    handler: Handler,
    target: str | None,
    swap: str | None,
) -> RouteSpec:
    method = method.upper()
    if not method.isalpha():
        msg = f"Invalid HTTP method {method!r} for route {path!r}."
        raise ConfigurationError(msg)
    if not path.startswith("/"):
        msg = f"Route path {path!r} must start with '/'."
        raise ConfigurationError(msg)
    if not callable(handler):
        msg = f"Handler for {method} {path} is not callable."
        raise ConfigurationError(msg)
    return RouteSpec(method=method, path=path, handler=handler, target=target, swap=swap)
