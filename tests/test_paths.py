"""Operation building: parameters, content types and per-route diagnostics."""

import pytest

from route_swagger.errors import SwaggerBuildError
from route_swagger.routes import RouteDescriptor
from route_swagger.schema.base import file, integer, number, obj, string
from route_swagger.settings import PathReplacement, Settings
from route_swagger.swagger.paths import Paths, path_requires, remove_base_path


def _route(path="/items", method="GET", **kwargs) -> RouteDescriptor:
    return RouteDescriptor(path=path, method=method, **kwargs)


def _build(*routes, **settings):
    settings = Settings(**settings)
    return Paths(settings).build(list(routes)), settings


def _operation(result, path, method="get"):
    return result["paths"][path][method]


class TestPathResolution:
    def test_base_path_is_stripped(self):
        result, _ = _build(
            _route("/api/widgets/{id}", validate={"params": obj({"id": integer()})}),
            base_path="/api",
        )
        assert list(result["paths"]) == ["/widgets/{id}"]

    def test_root_base_path_keeps_path(self):
        result, _ = _build(_route("/api/widgets/{id}"), base_path="/")
        assert list(result["paths"]) == ["/api/widgets/{id}"]

    def test_endpoint_replacements(self):
        result, _ = _build(
            _route("/v1/widgets"),
            path_replacements=[PathReplacement(replace_in="endpoints", pattern=r"^/v1", replacement="")],
        )
        assert list(result["paths"]) == ["/widgets"]

    def test_remove_base_path_of_base_itself(self):
        assert remove_base_path("/api", "/api", []) == "/"

    def test_methods_share_a_path(self):
        result, _ = _build(_route("/items", "GET"), _route("/items", "post"))
        assert set(result["paths"]["/items"]) == {"get", "post"}


class TestOperationIdentity:
    def test_explicit_id(self):
        result, _ = _build(_route(id="listItems"))
        assert _operation(result, "/items")["operationId"] == "listItems"

    def test_derived_id(self):
        result, _ = _build(_route("/items/{id}", "DELETE"))
        assert _operation(result, "/items/{id}", "delete")["operationId"] == "deleteItemsId"

    def test_derived_ids_never_collide(self):
        result, _ = _build(_route("/item/{id}"), _route("/item/id"))
        first = _operation(result, "/item/{id}")["operationId"]
        second = _operation(result, "/item/id")["operationId"]
        assert first != second
        assert first.startswith("getItemId_")
        assert second.startswith("getItemId_")

    def test_derived_ids_ignore_route_order(self):
        forward, _ = _build(_route("/item/{id}"), _route("/item/id"))
        backward, _ = _build(_route("/item/id"), _route("/item/{id}"))
        for path in ("/item/{id}", "/item/id"):
            assert _operation(forward, path)["operationId"] == _operation(backward, path)["operationId"]

    def test_derived_id_yields_to_explicit_id(self):
        result, _ = _build(_route("/other", id="getItems"), _route())
        assert _operation(result, "/other")["operationId"] == "getItems"
        assert _operation(result, "/items")["operationId"].startswith("getItems_")

    def test_derived_ids_are_stable(self):
        routes = [_route("/item/{id}"), _route("/item/id")]
        first, _ = _build(*routes)
        second, _ = _build(*routes)
        assert first == second

    def test_tags_fall_back_to_groups(self):
        result, _ = _build(_route("/api/widgets"), base_path="/api")
        assert _operation(result, "/widgets")["tags"] == ["widgets"]

    def test_explicit_tags(self):
        result, _ = _build(_route(tags=["store"]))
        assert _operation(result, "/items")["tags"] == ["store"]

    def test_description_list_joined(self):
        result, _ = _build(_route(description=["First", "Second"]))
        assert _operation(result, "/items")["description"] == "First<br/><br/>Second"


class TestPayload:
    def test_json_payload_is_one_body_parameter(self):
        result, _ = _build(_route(method="POST", validate={"payload": obj({"name": string(), "age": number()})}))
        operation = _operation(result, "/items", "post")
        assert operation["parameters"] == [
            {"in": "body", "name": "body", "schema": {"$ref": "#/definitions/Model1"}}
        ]
        assert "consumes" not in operation
        assert result["definitions"]["Model1"]["properties"] == {
            "name": {"type": "string"},
            "age": {"type": "number"},
        }

    def test_form_payload_is_form_data(self):
        result, _ = _build(
            _route(method="POST", payload_type="form", validate={"payload": obj({"name": string(), "age": number()})})
        )
        operation = _operation(result, "/items", "post")
        assert [(p["name"], p["in"]) for p in operation["parameters"]] == [
            ("name", "formData"),
            ("age", "formData"),
        ]
        assert operation["consumes"] == ["application/x-www-form-urlencoded"]
        assert result["definitions"] == {}

    def test_global_form_payload_type(self):
        result, _ = _build(_route(method="POST", validate={"payload": obj({"name": string()})}), payload_type="form")
        assert _operation(result, "/items", "post")["parameters"][0]["in"] == "formData"

    def test_form_field_named_type(self):
        result, settings = _build(
            _route(method="POST", payload_type="form", validate={"payload": {"name": "string", "type": "string"}})
        )
        params = _operation(result, "/items", "post")["parameters"]
        assert [(p["name"], p["in"]) for p in params] == [("name", "formData"), ("type", "formData")]
        assert not settings.diagnostics.errors

    def test_form_payload_without_children_logs_error(self):
        result, settings = _build(_route(method="POST", payload_type="form", validate={"payload": string()}))
        operation = _operation(result, "/items", "post")
        assert "parameters" not in operation
        assert operation["consumes"] == ["application/x-www-form-urlencoded"]
        assert any("payload form-urlencoded" in msg for msg in settings.diagnostics.errors)

    def test_file_upload_is_multipart(self):
        result, _ = _build(
            _route(method="POST", payload_type="form", validate={"payload": obj({"upload": file(), "name": string()})})
        )
        operation = _operation(result, "/items", "post")
        assert operation["consumes"] == ["multipart/form-data"]
        assert operation["parameters"][0] == {"name": "upload", "in": "formData", "type": "file"}

    def test_route_consumes_wins(self):
        result, _ = _build(
            _route(method="POST", payload_type="form", consumes=["text/plain"], validate={"payload": obj({"a": string()})}),
            consumes=["application/xml"],
        )
        assert _operation(result, "/items", "post")["consumes"] == ["text/plain"]

    def test_global_consumes_and_produces_fallback(self):
        result, _ = _build(_route(), consumes=["application/xml"], produces=["application/xml"])
        operation = _operation(result, "/items")
        assert operation["consumes"] == ["application/xml"]
        assert operation["produces"] == ["application/xml"]


class TestPathParameters:
    def test_required_inferred_from_template(self):
        result, settings = _build(_route("/item/{id}", validate={"params": obj({"id": integer()})}))
        params = _operation(result, "/item/{id}")["parameters"]
        assert params == [{"name": "id", "in": "path", "type": "integer", "required": True}]
        assert settings.diagnostics.warnings == []

    def test_optional_placeholder_is_not_required(self):
        result, settings = _build(_route("/item/{id?}", validate={"params": obj({"id": integer()})}))
        param = _operation(result, "/item/{id?}")["parameters"][0]
        assert "required" not in param
        assert any("{id} is set as optional" in msg for msg in settings.diagnostics.warnings)

    def test_explicit_optional_is_dropped_with_warning(self):
        result, settings = _build(_route("/item/{id}", validate={"params": obj({"id": integer(required=False)})}))
        param = _operation(result, "/item/{id}")["parameters"][0]
        assert "required" not in param
        assert settings.diagnostics.warnings

    def test_non_object_params_logs_error(self):
        result, settings = _build(_route("/item/{id}", validate={"params": integer()}))
        assert "parameters" not in _operation(result, "/item/{id}")
        assert any("params parameter was set" in msg for msg in settings.diagnostics.errors)

    def test_path_requires(self):
        assert path_requires("/item/{id}", "id")
        assert path_requires("/item/{id}/parts", "id")
        assert path_requires("/item/:id", "id")
        assert not path_requires("/item/{id?}", "id")
        assert not path_requires("/item/{identifier}", "id")


class TestHeaderAndQuery:
    def test_accept_header_becomes_produces(self):
        headers = obj({
            "accept": string(enum=["application/json", "application/xml"], default="application/xml"),
            "x-trace": string(),
        })
        result, _ = _build(_route(validate={"headers": headers}))
        operation = _operation(result, "/items")
        assert operation["produces"] == ["application/xml", "application/json"]
        assert [p["name"] for p in operation["parameters"]] == ["x-trace"]

    def test_accept_header_kept_when_disabled(self):
        headers = obj({"Accept": string(enum=["a", "b"])})
        result, _ = _build(_route(validate={"headers": headers}), accept_to_produce=False)
        operation = _operation(result, "/items")
        assert "produces" not in operation
        assert operation["parameters"][0]["name"] == "Accept"

    def test_accept_header_with_empty_enum_is_removed(self):
        out = {}
        headers = [
            {"name": "Accept", "in": "header", "type": "string", "enum": []},
            {"name": "x-trace", "in": "header", "type": "string"},
        ]
        kept = Paths(Settings()).accept_to_produces(headers, out)
        assert [h["name"] for h in kept] == ["x-trace"]
        assert out["produces"] == []

    def test_content_type_header_removes_consumes(self):
        result, _ = _build(
            _route(
                method="POST",
                payload_type="form",
                validate={
                    "headers": obj({"Content-Type": string()}),
                    "payload": obj({"upload": file()}),
                },
            )
        )
        assert "consumes" not in _operation(result, "/items", "post")

    def test_query_parameters(self):
        query = obj({"limit": integer(required=True), "q": string()})
        result, _ = _build(_route(validate={"query": query}))
        assert _operation(result, "/items")["parameters"] == [
            {"name": "limit", "in": "query", "type": "integer", "required": True},
            {"name": "q", "in": "query", "type": "string"},
        ]

    def test_query_without_children_logs_error(self):
        _, settings = _build(_route(validate={"query": string()}))
        assert any("query parameter was set" in msg for msg in settings.diagnostics.errors)

    def test_parameter_order(self):
        route = _route(
            "/item/{id}",
            "PUT",
            validate={
                "payload": obj({"name": string()}),
                "query": obj({"dry_run": string()}),
                "params": obj({"id": integer()}),
                "headers": obj({"x-token": string()}),
            },
        )
        result, _ = _build(route)
        params = _operation(result, "/item/{id}", "put")["parameters"]
        assert [p["in"] for p in params] == ["header", "path", "query", "body"]


class TestValidatorFunctions:
    def test_query_function_becomes_placeholder(self):
        result, settings = _build(_route(validate={"query": lambda value: value}))
        assert _operation(result, "/items")["parameters"] == [
            {"name": "Hidden Model", "in": "query", "type": "string"}
        ]
        assert settings.diagnostics.warnings

    def test_header_function_becomes_placeholder(self):
        result, _ = _build(_route(validate={"headers": lambda value: value}))
        assert _operation(result, "/items")["parameters"][0]["in"] == "header"

    def test_payload_function_becomes_hidden_model(self):
        result, _ = _build(_route(method="POST", validate={"payload": lambda value: value}))
        operation = _operation(result, "/items", "post")
        assert operation["parameters"][0]["schema"] == {"$ref": "#/definitions/Hidden Model"}
        assert result["definitions"]["Hidden Model"] == {"type": "object"}

    def test_malformed_descriptor_becomes_placeholder(self):
        for query in ({"type": "object", "required": ["a"]}, {"type": "object", "keys": ["a"]}):
            result, settings = _build(_route(validate={"query": query}))
            assert _operation(result, "/items")["parameters"] == [
                {"name": "Hidden Model", "in": "query", "type": "string"}
            ]
            assert settings.diagnostics.warnings

    def test_path_function_is_removed(self):
        result, settings = _build(_route("/item/{id}", validate={"params": lambda value: value}))
        assert "parameters" not in _operation(result, "/item/{id}")
        assert any("params is not supported" in msg for msg in settings.diagnostics.errors)

    def test_normalized_method_is_upper_case(self):
        normalized = Paths(Settings()).normalize_route(_route(method="patch"))
        assert normalized.method == "PATCH"


class TestOperationFields:
    def test_deprecated_false_is_kept(self):
        result, _ = _build(_route(deprecated=False))
        assert _operation(result, "/items")["deprecated"] is False

    def test_deprecated_absent(self):
        result, _ = _build(_route())
        assert "deprecated" not in _operation(result, "/items")

    def test_order_and_security(self):
        result, _ = _build(_route(order=3, security=[{"jwt": []}]))
        operation = _operation(result, "/items")
        assert operation["x-order"] == 3
        assert operation["security"] == [{"jwt": []}]

    def test_no_empty_fields(self):
        result, _ = _build(_route())
        operation = _operation(result, "/items")
        for value in operation.values():
            assert value not in (None, [], {})

    def test_responses_from_route(self):
        result, _ = _build(_route(response={"schema": obj({"id": integer()}, label="Item")}))
        assert _operation(result, "/items")["responses"]["200"]["schema"] == {"$ref": "#/definitions/Item"}

    def test_undeclared_responses_get_default(self):
        result, _ = _build(_route("/items/{id}", "DELETE"))
        assert _operation(result, "/items/{id}", "delete")["responses"] == {
            "default": {"schema": {"type": "string"}, "description": "Successful"}
        }

    def test_empty_responses_is_fatal(self):
        operation = {"operationId": "deleteItemsId", "responses": {}}
        with pytest.raises(SwaggerBuildError) as exc_info:
            Paths(Settings()).validate_operation(operation, "/items/{id}", "DELETE")
        assert exc_info.value.path == "/items/{id}"
        assert exc_info.value.method == "DELETE"


class TestFreshState:
    def test_definitions_not_shared_between_builds(self):
        paths = Paths(Settings())
        first = paths.build([_route(response={"schema": obj({"id": integer()}, label="Item")})])
        second = paths.build([_route()])
        assert "Item" in first["definitions"]
        assert second["definitions"] == {}
