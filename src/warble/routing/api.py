"""Client attribute generation — the ``api`` object passed to render functions.

Each declared action becomes a generator that fills the route's ``:params``
from positional arguments and returns htmx attributes::

    api.toggle("42")
    # {"hx-patch": "/api/todos/42/toggle"}

    api.search(q="pika")
    # {"hx-get": "/api/search?q=pika"}

Positional values beyond the route's ``:params`` are appended as extra path
segments, and a trailing mapping argument becomes ``hx-vals``. Fewer
positional values than ``:params`` raises ``RouteArityError`` immediately,
during rendering.
"""

import json
import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from warble.errors import ConfigurationError, RouteArityError
from warble.routing.route import HTMX_METHODS, CompiledRoute, RouteSpec
from warble.routing.router import parse_path

logger = logging.getLogger("warble.routing")


@dataclass(frozen=True, slots=True)
class ActionAttrs:
    """Attribute generator for one compiled route."""

    route: CompiledRoute

    def __call__(self, *args: Any, **query: Any) -> dict[str, str]:
        values = list(args)
        extra: Mapping[str, Any] | None = None
        if values and isinstance(values[-1], Mapping):
            extra = values.pop()

        names = self.route.param_names
        if len(values) < len(names):
            raise RouteArityError(
                self.route.component,
                self.route.action,
                f"{self.route.method} {self.route.path}",
                expected=len(names),
                got=len(values),
            )

        bound = dict(zip(names, values[: len(names)], strict=True))
        attrs: dict[str, str] = {
            f"hx-{self.route.method.lower()}": self.url(bound, query, values[len(names) :]),
        }
        spec = self.route.spec
        if spec.target is not None:
            attrs["hx-target"] = spec.target
        if spec.swap is not None:
            attrs["hx-swap"] = spec.swap
        if extra:
            attrs["hx-vals"] = json.dumps(dict(extra), separators=(",", ":"))
        return attrs

    def url(
        self,
        params: Mapping[str, Any],
        query: Mapping[str, Any] | None = None,
        extra: Sequence[Any] = (),
    ) -> str:
        """Resolve the path pattern with *params*, appending *extra* segments and *query*."""
        parts = []
        for seg in self.route.segments:
            if seg.is_param:
                parts.append(quote(str(params[seg.param_name or ""]), safe=""))
            else:
                parts.append(seg.value)
        parts.extend(quote(str(v), safe="") for v in extra)
        path = "/" + "/".join(parts)
        if query:
            pairs = [(k, v) for k, v in query.items() if v is not None]
            if pairs:
                path = f"{path}?{urlencode(pairs)}"
        return path


class ApiMap:
    """Action name -> attribute generator, with attribute access.

    Not a ``Mapping``: action names such as ``items`` or ``get`` must
    resolve to actions, not mapping methods.

    ``api.remove(item_id)`` and ``api["remove"](item_id)`` are equivalent.
    """

    __slots__ = ("_actions", "_component")

    def __init__(self, component: str, actions: Mapping[str, ActionAttrs]) -> None:
        self._component = component
        self._actions = dict(actions)

    def __getitem__(self, action: str) -> ActionAttrs:
        return self._actions[action]

    def __getattr__(self, action: str) -> ActionAttrs:
        if action.startswith("_"):
            raise AttributeError(action)
        try:
            return self._actions[action]
        except KeyError:
            msg = f"Component {self._component!r} has no api action {action!r}"
            raise AttributeError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action: object) -> bool:
        return action in self._actions

    def __repr__(self) -> str:
        return f"ApiMap({self._component!r}, {list(self._actions)})"


def compile_routes(
    component: str,
    routes: Mapping[str, RouteSpec],
) -> tuple[tuple[CompiledRoute, ...], ApiMap]:
    """Compile a component's route declarations, preserving order.

    Returns the compiled routes (for the ``Router``) and the ``ApiMap``
    handed to the render function.
    """
    compiled: list[CompiledRoute] = []
    actions: dict[str, ActionAttrs] = {}

    for action, spec in routes.items():
        if not isinstance(spec, RouteSpec):
            msg = (
                f"api.{action} of {component!r} must be declared with get()/post()/"
                f"patch()/delete()/route(), got {type(spec).__name__}"
            )
            raise ConfigurationError(msg)
        if spec.method not in HTMX_METHODS:
            logger.warning(
                "%s: api.%s uses %s, which has no htmx attribute", component, action, spec.method
            )
        route = CompiledRoute(
            component=component,
            action=action,
            spec=spec,
            segments=parse_path(spec.path),
        )
        compiled.append(route)
        actions[action] = ActionAttrs(route)

    return tuple(compiled), ApiMap(component, actions)
