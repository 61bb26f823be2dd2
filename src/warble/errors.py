"""Warble exception hierarchy.

Shared across the registry, property parsing, style compilation, routing,
and the expansion engine so every module raises and catches the same types.

Two families:

- ``ConfigurationError`` — a component is miswritten. Raised at
  registration or first use and never swallowed.
- ``ComponentError`` — a single render branch failed (bad attribute text,
  unknown tag). Collected by the expansion engine so one broken nested
  component cannot blank the whole page.
"""


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when a component definition is invalid.

    Typically raised by ``Registry.define()`` at startup.
    """


class ComponentError(WarbleError):
    """A failure scoped to one component render.

    Carries the offending component name so callers can log it or
    render a fallback.
    """

    def __init__(self, component: str, message: str) -> None:
        self.component = component
        super().__init__(message)


class SchemaInferenceError(ConfigurationError, ComponentError):
    """The property schema could not be derived from a render function."""

    def __init__(self, component: str, detail: str) -> None:
        self.detail = detail
        ComponentError.__init__(
            self, component, f"Cannot infer properties for {component!r}: {detail}"
        )


class PropertyTypeError(ComponentError):
    """A raw attribute could not be parsed into its declared kind."""

    def __init__(self, component: str, prop: str, kind: str, raw: str) -> None:
        self.prop = prop
        self.kind = kind
        self.raw = raw
        super().__init__(
            component,
            f"Property {prop!r} of {component!r} expects a {kind}, got {raw!r}",
        )


class PropertyTransformError(ComponentError):
    """A legacy ``transform`` callable raised while converting raw attributes."""

    def __init__(self, component: str, cause: Exception) -> None:
        self.cause = cause
        super().__init__(
            component,
            f"Transform of {component!r} failed: {type(cause).__name__}: {cause}",
        )


class UnknownComponentError(ComponentError):
    """No component is registered under the requested name."""

    def __init__(self, component: str) -> None:
        super().__init__(component, f"Unknown component {component!r}")


class RouteArityError(ConfigurationError):
    """A client attribute generator received fewer path arguments than its route needs."""

    def __init__(
        self,
        component: str,
        action: str,
        pattern: str,
        expected: int,
        got: int,
    ) -> None:
        self.component = component
        self.action = action
        self.pattern = pattern
        self.expected = expected
        self.got = got
        super().__init__(
            f"api.{action} of {component!r} ({pattern}) needs at least {expected} "
            f"path argument(s), got {got}"
        )


class StyleCompileError(ConfigurationError):
    """Two style keys of one component produced the same class name."""

    def __init__(self, component: str, detail: str) -> None:
        self.component = component
        super().__init__(f"Styles of {component!r}: {detail}")
