"""Compiled router with ordered, first-registered-wins matching.

Routes are collected from component definitions in registration order
and frozen with ``compile()``. A request matches a route when the method
is equal, the segment count is equal, and every literal segment matches
exactly. ``:name`` segments bind any non-empty path segment.

No match is a normal result, not an exception: ``dispatch()`` returns a
``DispatchResult`` with ``found=False`` which the HTTP layer turns into a 404.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from warble._internal.invoke import invoke
from warble.errors import ConfigurationError
from warble.routing.route import CompiledRoute, PathSegment, RouteMatch

logger = logging.getLogger("warble.routing")


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route path pattern into segments.

    Examples::

        "/api/items"       -> (PathSegment("api"), PathSegment("items"))
        "/api/items/:id"   -> (..., PathSegment(":id", is_param=True, param_name="id"))
        "/"                -> ()
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in split_path(path):
        if part.startswith(":"):
            name = part[1:]
            if not name.isidentifier():
                msg = f"Invalid parameter {part!r} in route path {path!r}."
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Duplicate parameter {part!r} in route path {path!r}."
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


def split_path(path: str) -> list[str]:
    """Split a request path into segments, ignoring leading/trailing slashes."""
    stripped = path.split("?", 1)[0].strip("/")
    if not stripped:
        return []
    return stripped.split("/")


def match_segments(segments: tuple[PathSegment, ...], parts: list[str]) -> dict[str, str] | None:
    """Match request path *parts* against compiled *segments*.

    Returns the bound parameters, or ``None`` when the path does not match.
    """
    if len(segments) != len(parts):
        return None
    params: dict[str, str] = {}
    for seg, part in zip(segments, parts, strict=True):
        if seg.is_param:
            if not part:
                return None
            params[seg.param_name or ""] = part
        elif seg.value != part:
            return None
    return params


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Outcome of ``Router.dispatch()``.

    ``found`` is False when no route matched; ``value`` is then ``None``.
    """

    found: bool
    method: str
    path: str
    match: RouteMatch | None = None
    value: Any = None
    allowed: frozenset[str] = field(default_factory=frozenset)


class Router:
    """Ordered route table shared by every registered component.

    Usage::

        router = Router()
        router.add(compiled_route)
        router.compile()
        match = router.match("GET", "/api/items/42")
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[CompiledRoute] = []
        self._compiled = False

    def add(self, route: CompiledRoute) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._routes.append(route)

    @property
    def routes(self) -> list[CompiledRoute]:
        """Return all registered routes in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or ``None``."""
        method = method.upper()
        parts = split_path(path)
        for route in self._routes:
            if route.method != method:
                continue
            params = match_segments(route.segments, parts)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Methods of every route whose pattern matches *path*."""
        parts = split_path(path)
        return frozenset(
            r.method for r in self._routes if match_segments(r.segments, parts) is not None
        )

    async def dispatch(self, method: str, path: str, request: Any = None) -> DispatchResult:
        """Match and call the handler with ``(request, params)``.

        Handlers may be sync or async. Exceptions raised by a handler
        propagate to the caller.
        """
        match = self.match(method, path)
        if match is None:
            logger.debug("No route matches %s %s", method, path)
            return DispatchResult(
                found=False,
                method=method.upper(),
                path=path,
                allowed=self.allowed_methods(path),
            )
        value = await invoke(match.route.handler, request, match.path_params)
        return DispatchResult(
            found=True,
            method=method.upper(),
            path=path,
            match=match,
            value=value,
        )
