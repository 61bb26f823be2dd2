"""Tests for warble.routing.api — compiled routes and client attributes."""

import pytest

from warble.errors import ConfigurationError, RouteArityError
from warble.routing.api import ApiMap, compile_routes
from warble.routing.route import delete, get, patch, route


def _handler(request, params) -> str:
    return "ok"


def _api(**routes) -> ApiMap:
    _, api = compile_routes("todo-item", routes)
    return api


class TestCompileRoutes:
    def test_order_preserved(self) -> None:
        compiled, _ = compile_routes(
            "todo-item",
            {
                "toggle": patch("/api/todos/:id/toggle", _handler),
                "remove": delete("/api/todos/:id", _handler),
            },
        )
        assert [r.action for r in compiled] == ["toggle", "remove"]
        assert compiled[0].component == "todo-item"
        assert compiled[0].param_names == ("id",)

    def test_rejects_undeclared_spec(self) -> None:
        with pytest.raises(ConfigurationError, match="api.toggle"):
            compile_routes("todo-item", {"toggle": ("PATCH", "/x", _handler)})

    def test_empty(self) -> None:
        compiled, api = compile_routes("plain", {})
        assert compiled == ()
        assert len(api) == 0


class TestActionAttrs:
    def test_substitutes_param(self) -> None:
        api = _api(toggle=patch("/api/todos/:id/toggle", _handler))
        assert api.toggle("42") == {"hx-patch": "/api/todos/42/toggle"}

    def test_each_method(self) -> None:
        api = _api(
            show=get("/api/items/:id", _handler),
            remove=delete("/api/items/:id", _handler),
            create=route("POST /api/items", _handler),
        )
        assert api.show(1) == {"hx-get": "/api/items/1"}
        assert api.remove(1) == {"hx-delete": "/api/items/1"}
        assert api.create() == {"hx-post": "/api/items"}

    def test_multiple_params_in_order(self) -> None:
        api = _api(move=route("POST /api/boards/:board/cards/:card", _handler))
        assert api.move("b1", "c9") == {"hx-post": "/api/boards/b1/cards/c9"}

    def test_values_are_quoted(self) -> None:
        api = _api(show=get("/api/items/:id", _handler))
        assert api.show("a b/c") == {"hx-get": "/api/items/a%20b%2Fc"}

    def test_query_from_keywords(self) -> None:
        api = _api(search=get("/api/search", _handler))
        assert api.search(q="pika", page=None) == {"hx-get": "/api/search?q=pika"}

    def test_trailing_mapping_becomes_vals(self) -> None:
        api = _api(toggle=patch("/api/todos/:id/toggle", _handler))
        attrs = api.toggle("1", {"done": True})
        assert attrs == {"hx-patch": "/api/todos/1/toggle", "hx-vals": '{"done":true}'}

    def test_target_and_swap(self) -> None:
        api = _api(remove=delete("/api/todos/:id", _handler, target="closest div", swap="outerHTML"))
        assert api.remove("1") == {
            "hx-delete": "/api/todos/1",
            "hx-target": "closest div",
            "hx-swap": "outerHTML",
        }

    def test_too_few_arguments(self) -> None:
        api = _api(toggle=patch("/api/todos/:id/toggle", _handler))
        with pytest.raises(RouteArityError) as exc_info:
            api.toggle()
        err = exc_info.value
        assert err.component == "todo-item"
        assert err.action == "toggle"
        assert (err.expected, err.got) == (1, 0)

    def test_extra_arguments_become_path_segments(self) -> None:
        api = _api(
            create=route("POST /api/items", _handler),
            show=get("/api/items/:id", _handler),
        )
        assert api.create("extra") == {"hx-post": "/api/items/extra"}
        assert api.show("1", "a b", 2) == {"hx-get": "/api/items/1/a%20b/2"}

    def test_extra_segments_with_vals_and_query(self) -> None:
        api = _api(show=get("/api/items/:id", _handler))
        attrs = api.show("1", "tab", {"x": 1}, page=2)
        assert attrs == {"hx-get": "/api/items/1/tab?page=2", "hx-vals": '{"x":1}'}


class TestApiMap:
    def test_item_and_attribute_access(self) -> None:
        api = _api(items=get("/api/items", _handler))
        assert api["items"] is api.items
        assert api.items() == {"hx-get": "/api/items"}

    def test_missing_action(self) -> None:
        api = _api()
        with pytest.raises(AttributeError, match="no api action 'nope'"):
            api.nope()

    def test_contains_and_iter(self) -> None:
        api = _api(a=get("/a", _handler), b=get("/b", _handler))
        assert "a" in api
        assert list(api) == ["a", "b"]
