"""Tests for warble.registry — registration, compilation, and the shared router."""

import pytest

from warble.errors import (
    ConfigurationError,
    RouteArityError,
    SchemaInferenceError,
    StyleCompileError,
    UnknownComponentError,
)
from warble.markup import h
from warble.props import PropSpec, number, string
from warble.registry import Registry, default_registry, define_component
from warble.routing.route import delete, get, patch


def _badge(classes, *, label=string("new")):
    return h("span", {"class": classes.badge}, label)


def _handler(request, params) -> str:
    return "ok"


class TestDefine:
    def test_compiles_on_registration(self, registry: Registry) -> None:
        registry.define("badge", _badge, styles={"badge": "{ color: red; }"})
        compiled = registry.compiled("badge")
        assert compiled.schema is not None
        assert compiled.schema.props == (PropSpec("label", "string", "new"),)
        assert compiled.classes.badge == "badge"
        assert compiled.styles.css == ".badge { color: red; }"

    def test_returns_definition(self, registry: Registry) -> None:
        definition = registry.define("badge", _badge, styles={"badge": "{ }"})
        assert definition.name == "badge"
        assert registry.get("badge") is definition
        assert definition.is_legacy is False

    @pytest.mark.parametrize("name", ["", "Badge", "todo_item", "-x", "x-", "todo--item", "1st"])
    def test_rejects_bad_names(self, registry: Registry, name: str) -> None:
        with pytest.raises(ConfigurationError, match="kebab-case"):
            registry.define(name, _badge)

    def test_rejects_non_callable(self, registry: Registry) -> None:
        with pytest.raises(ConfigurationError, match="not callable"):
            registry.define("badge", "nope")  # type: ignore[arg-type]

    def test_props_and_transform_exclusive(self, registry: Registry) -> None:
        with pytest.raises(ConfigurationError, match="both props and transform"):
            registry.define("x", _badge, props={"a": number()}, transform=dict)

    def test_schema_error_surfaces_at_registration(self, registry: Registry) -> None:
        def broken(*, tabs=string("")):
            return tabs.split(",")[5]

        with pytest.raises(SchemaInferenceError) as exc_info:
            registry.define("tabs", broken)
        assert exc_info.value.component == "tabs"
        assert "tabs" not in registry

    def test_style_collision_surfaces_at_registration(self, registry: Registry) -> None:
        with pytest.raises(StyleCompileError):
            registry.define("x", _badge, styles={"badge": "{ }", "Badge": "{ }"})

    def test_route_arity_in_render_surfaces_at_registration(self, registry: Registry) -> None:
        def render(api):
            return h("button", {**api.remove()})

        with pytest.raises(RouteArityError):
            registry.define("x", render, api={"remove": delete("/api/x/:id", _handler)})

    def test_reregistration_replaces(self, registry: Registry) -> None:
        registry.define("badge", _badge, styles={"badge": "{ }"})

        def other(*, count=number(0)):
            return str(count)

        registry.define("badge", other)
        compiled = registry.compiled("badge")
        assert compiled.definition.render is other
        assert compiled.schema is not None
        assert compiled.schema.names == ("count",)
        assert len(compiled.classes) == 0
        assert registry.names == ("badge",)

    def test_decorator(self, registry: Registry) -> None:
        @registry.component("badge", styles={"badge": "{ }"})
        def badge(classes, *, label=string("x")):
            return label

        assert badge(None, label="direct") == "direct"
        assert "badge" in registry

    def test_legacy_props(self, registry: Registry) -> None:
        def render(props, api, classes):
            return str(props["step"])

        definition = registry.define("legacy", render, props={"step": number(2)})
        assert definition.is_legacy is True
        schema = registry.compiled("legacy").schema
        assert schema is not None
        assert schema.names == ("step",)

    def test_legacy_transform(self, registry: Registry) -> None:
        registry.define("legacy", lambda props, api, classes: "", transform=dict)
        assert registry.compiled("legacy").schema is None


class TestLookup:
    def test_unknown(self, registry: Registry) -> None:
        with pytest.raises(UnknownComponentError) as exc_info:
            registry.compiled("nope")
        assert exc_info.value.component == "nope"

    def test_names_in_order(self, registry: Registry) -> None:
        registry.define("b", lambda: "")
        registry.define("a", lambda: "")
        assert registry.names == ("b", "a")
        assert len(registry) == 2

    def test_clear(self, registry: Registry) -> None:
        registry.define("a", lambda: "")
        registry.clear()
        assert len(registry) == 0


class TestRouter:
    def test_collects_routes_in_registration_order(self, registry: Registry) -> None:
        registry.define("a", lambda: "", api={"list": get("/api/a", _handler)})
        registry.define(
            "b",
            lambda: "",
            api={
                "toggle": patch("/api/b/:id", _handler),
                "remove": delete("/api/b/:id", _handler),
            },
        )
        router = registry.router()
        assert [(r.component, r.action) for r in router.routes] == [
            ("a", "list"),
            ("b", "toggle"),
            ("b", "remove"),
        ]

    def test_cached_until_next_registration(self, registry: Registry) -> None:
        registry.define("a", lambda: "", api={"list": get("/api/a", _handler)})
        first = registry.router()
        assert registry.router() is first

        registry.define("b", lambda: "", api={"list": get("/api/b", _handler)})
        second = registry.router()
        assert second is not first
        assert second.match("GET", "/api/b") is not None


class TestDefaultRegistry:
    def test_empty_registry_is_used_as_given(
        self, registry: Registry, shared_registry: Registry
    ) -> None:
        assert len(registry) == 0
        define_component("badge", _badge, styles={"badge": "{ }"}, registry=registry)
        assert "badge" in registry
        assert "badge" not in shared_registry

    def test_without_registry_uses_shared(self, shared_registry: Registry) -> None:
        define_component("badge", _badge, styles={"badge": "{ }"})
        assert "badge" in shared_registry

    def test_define_component_targets_given_registry(self, registry: Registry) -> None:
        define_component("badge", _badge, styles={"badge": "{ }"}, registry=registry)
        assert "badge" in registry
        assert "badge" not in default_registry()

    def test_decorator_form(self, registry: Registry) -> None:
        @define_component("badge", styles={"badge": "{ }"}, registry=registry)
        def badge(classes, *, label=string("x")):
            return label

        assert callable(badge)
        assert "badge" in registry
