"""Warble — server-side components for htmx apps.

Components pair a render function with scoped styles and API routes.
Nested component tags in rendered markup are expanded recursively, and
htmx attributes are generated from the component's route declarations.

Basic usage::

    from warble import define_component, h, number, render_component

    @define_component("counter", styles={"display": "{ font-weight: bold; }"})
    def counter(classes, *, step=number(1)):
        return h("span", {"class": classes.display}, step)

    result = render_component("counter", {"step": "5"})
    result.html  # '<span class="display">5</span>'
    result.css   # '.display { font-weight: bold; }'
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ApiMap",
    "ClassMap",
    "ComponentError",
    "ConfigurationError",
    "Element",
    "InlineTemplate",
    "PropertyTransformError",
    "PropertyTypeError",
    "Registry",
    "RenderConfig",
    "RenderResult",
    "RouteArityError",
    "Router",
    "SchemaInferenceError",
    "StyleCompileError",
    "UnknownComponentError",
    "WarbleError",
    "array",
    "boolean",
    "default_registry",
    "define_component",
    "delete",
    "fragment",
    "get",
    "h",
    "number",
    "obj",
    "patch",
    "post",
    "put",
    "render_component",
    "route",
    "string",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` fast while providing a clean top-level API.
    """
    if name in ("Registry", "default_registry", "define_component"):
        from warble import registry as _registry

        return getattr(_registry, name)

    if name in ("RenderResult", "render_component"):
        from warble import render as _render

        return getattr(_render, name)

    if name == "RenderConfig":
        from warble.config import RenderConfig

        return RenderConfig

    if name in ("Element", "fragment", "h"):
        from warble import markup as _markup

        return getattr(_markup, name)

    if name in ("array", "boolean", "number", "obj", "string"):
        from warble import props as _props

        return getattr(_props, name)

    if name in ("delete", "get", "patch", "post", "put", "route"):
        from warble.routing import route as _route

        return getattr(_route, name)

    if name == "Router":
        from warble.routing.router import Router

        return Router

    if name == "ApiMap":
        from warble.routing.api import ApiMap

        return ApiMap

    if name == "ClassMap":
        from warble.styles import ClassMap

        return ClassMap

    if name == "InlineTemplate":
        from warble.templating import InlineTemplate

        return InlineTemplate

    if name in (
        "ComponentError",
        "ConfigurationError",
        "PropertyTransformError",
        "PropertyTypeError",
        "RouteArityError",
        "SchemaInferenceError",
        "StyleCompileError",
        "UnknownComponentError",
        "WarbleError",
    ):
        from warble import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
