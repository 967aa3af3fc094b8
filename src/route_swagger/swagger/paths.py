"""Build the ``paths`` section of a Swagger document from route descriptors.

``Paths.build`` normalizes the routes, then ``Paths.build_routes`` turns each
one into an operation object. Problems in a single route are logged through
the settings' diagnostics and the route is still documented as well as it can
be; only a broken operation contract aborts the build.
"""

import hashlib
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from route_swagger.errors import SwaggerBuildError
from route_swagger.routes import NormalizedRoute, RouteDescriptor
from route_swagger.schema.base import Schema, obj, string
from route_swagger.schema.ingest import has_children, has_file_type, is_validator_function, to_schema
from route_swagger.settings import PathReplacement, Settings
from route_swagger.swagger import parameters
from route_swagger.swagger.properties import Properties
from route_swagger.swagger.responses import Responses
from route_swagger.utilities import (
    create_id,
    delete_empty_properties,
    get_groups,
    replace_in_path,
    sort_first_item,
    starts_with_base_path,
)

FORM_CONSUMES = ["application/x-www-form-urlencoded"]
MULTIPART_CONSUMES = ["multipart/form-data"]
DESCRIPTION_SEPARATOR = "<br/><br/>"

PARAM_LOCATIONS = ("query_params", "path_params", "header_params", "payload_params")


class OperationModel(BaseModel):
    """Shape every emitted operation must have."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    operation_id: str = Field(alias="operationId")
    consumes: list[str] | None = None
    produces: list[str] | None = None
    parameters: list[dict] | None = None
    responses: dict[str, dict]
    deprecated: bool | None = None
    security: list[dict] | None = None

    @field_validator("responses")
    @classmethod
    def responses_not_empty(cls, value: dict) -> dict:
        if not value:
            raise ValueError("an operation needs at least one response")
        return value


class Paths:
    """Translates routes into ``paths`` plus the definitions they reference."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.properties = Properties(settings, {}, {})
        self.responses = Responses(settings, {}, {}, properties=self.properties)

    def build(self, routes: list[RouteDescriptor]) -> dict[str, Any]:
        """Build ``definitions``, ``x-alt-definitions`` and ``paths``."""
        return self.build_routes([self.normalize_route(route) for route in routes])

    def normalize_route(self, route: RouteDescriptor) -> NormalizedRoute:
        path = replace_in_path(route.path, ["endpoints"], self.settings.path_replacements)
        schemas = {
            "query_params": route.validation.query,
            "path_params": route.validation.params,
            "header_params": route.validation.headers,
            "payload_params": route.validation.payload,
        }
        for location in PARAM_LOCATIONS:
            schemas[location] = self._normalize_schema(location, to_schema(schemas[location]))

        groups = route.group
        if groups is None:
            groups = get_groups(
                route.path,
                self.settings.base_path,
                self.settings.path_prefix_size,
                self.settings.path_replacements,
            )

        return NormalizedRoute(
            path=path,
            method=route.method.upper(),
            id=route.id,
            summary=route.summary,
            description=route.description,
            tags=route.tags,
            response_schema=route.response.response_schema,
            response_status=route.response.status,
            responses=route.responses,
            consumes=route.consumes,
            produces=route.produces,
            payload_type=route.payload_type,
            security=route.security,
            order=route.order,
            deprecated=route.deprecated,
            groups=groups,
            **schemas,
        )

    def _normalize_schema(self, location: str, schema: Schema | None) -> Schema | None:
        if not is_validator_function(schema):
            return schema
        if location == "path_params":
            self.settings.log(
                ["validation", "error"],
                "Using a validator function for params is not supported and has been removed.",
            )
            return None
        self.settings.log(
            ["validation", "warning"],
            "Using a validator function for a query, header or payload is not supported.",
        )
        if location == "payload_params":
            return obj(label="Hidden Model")
        return obj({"Hidden Model": string()})

    def build_routes(self, routes: list[NormalizedRoute]) -> dict[str, Any]:
        path_obj: dict[str, dict[str, Any]] = {}
        swagger: dict[str, Any] = {"definitions": {}, "x-alt-definitions": {}}
        definition_cache: list[dict[str, str]] = [{}, {}]

        # fresh per build
        self.properties = Properties(
            self.settings, swagger["definitions"], swagger["x-alt-definitions"], definition_cache
        )
        self.responses = Responses(
            self.settings, swagger["definitions"], swagger["x-alt-definitions"], properties=self.properties
        )
        operation_ids = self.derive_operation_ids(routes)

        for route in routes:
            method = route.method
            path = remove_base_path(route.path, self.settings.base_path, self.settings.path_replacements)
            out: dict[str, Any] = {
                "summary": route.summary,
                "operationId": route.id or operation_ids[(method, route.path)],
                "description": route.description,
                "parameters": [],
                "consumes": [],
                "produces": [],
            }

            # tags in swagger are used for grouping
            out["tags"] = route.tags or route.groups

            if isinstance(route.description, list):
                out["description"] = DESCRIPTION_SEPARATOR.join(route.description)

            if route.security:
                out["security"] = route.security

            # route option wins over plugin option
            payload_type = overload(self.settings.payload_type, route.payload_type)

            payload_structures = default_structures()
            payload_schema = route.payload_params
            if payload_type.lower() == "json":
                payload_structures = self.get_swagger_structures(payload_schema, "body", True, False)
            else:
                if has_children(payload_schema):
                    payload_structures = self.get_swagger_structures(payload_schema, "formData", False, False)
                else:
                    self.check_parameter_error(payload_schema, "payload form-urlencoded", path)
                out["consumes"] = list(FORM_CONSUMES)

            if has_file_type(payload_schema):
                out["consumes"] = list(MULTIPART_CONSUMES)

            # user defined over automatically discovered
            if self.settings.consumes or route.consumes:
                out["consumes"] = overload(self.settings.consumes, route.consumes)
            if self.settings.produces or route.produces:
                out["produces"] = overload(self.settings.produces, route.produces)

            path_structures = default_structures()
            path_schema = route.path_params
            if has_children(path_schema):
                path_structures = self.get_swagger_structures(path_schema, "path", False, False)
                for item in path_structures["parameters"]:
                    self.set_path_parameter_required(item, path)
            else:
                self.check_parameter_error(path_schema, "params", path)

            header_structures = default_structures()
            header_schema = route.header_params
            if has_children(header_schema):
                header_structures = self.get_swagger_structures(header_schema, "header", False, False)
            else:
                self.check_parameter_error(header_schema, "headers", path)

            # a user set accept header with an enum becomes the produces list
            if self.settings.accept_to_produce:
                header_structures["parameters"] = self.accept_to_produces(header_structures["parameters"], out)

            query_structures = default_structures()
            query_schema = route.query_params
            if has_children(query_schema):
                query_structures = self.get_swagger_structures(query_schema, "query", False, False)
            else:
                self.check_parameter_error(query_schema, "query", path)

            out["parameters"] = (
                header_structures["parameters"]
                + path_structures["parameters"]
                + query_structures["parameters"]
                + payload_structures["parameters"]
            )

            # the api sets the content-type header itself
            if has_content_type_header(out):
                del out["consumes"]

            out["responses"] = self.responses.build(
                route.responses,        # user defined schemas
                route.response_schema,  # default schema
                route.response_status,  # status schemas
                True,                   # use definitions
                False,                  # is alt
            )

            if route.order:
                out["x-order"] = route.order
            if route.deprecated is not None:
                out["deprecated"] = route.deprecated

            operation = delete_empty_properties(out)
            self.validate_operation(operation, path, method)
            path_obj.setdefault(path, {})[method.lower()] = operation

        swagger["paths"] = path_obj
        return swagger

    def set_path_parameter_required(self, item: dict[str, Any], path: str) -> None:
        """Infer ``required`` from the path template when the schema is silent."""
        if "required" not in item and path_requires(path, item["name"]):
            item["required"] = True
        if item.get("required") is False:
            del item["required"]
        if not item.get("required"):
            self.settings.log(
                ["validation", "warning"],
                f"The {path} params parameter {{{item['name']}}} is set as optional. "
                "This will work in the UI, but is invalid in the swagger spec",
            )

    def accept_to_produces(self, headers: list[dict[str, Any]], out: dict[str, Any]) -> list[dict[str, Any]]:
        """Turn an ``accept`` header that carries an enum into the produces list."""
        kept = []
        for header in headers:
            if header["name"].lower() == "accept" and "enum" in header:
                out["produces"] = sort_first_item(header["enum"], header.get("default"))
                continue
            kept.append(header)
        return kept

    def get_swagger_structures(
        self,
        schema: Schema | None,
        parameter_type: str,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any]:
        """Property tree and parameter list that describe ``schema``."""
        out_properties = None
        out_parameters = None
        if schema is not None:
            out_properties = self.properties.parse_property(
                None, schema, None, parameter_type, use_definitions, is_alt
            )
            out_parameters = parameters.from_properties(out_properties, parameter_type)
        return {
            "properties": out_properties or {},
            "parameters": out_parameters or [],
        }

    def check_parameter_error(self, schema: Schema | None, parameter_type: str, path: str) -> None:
        if schema is not None and not has_children(schema):
            self.settings.log(
                ["validation", "error"],
                f"The {path} route {parameter_type} parameter was set, "
                "but not as an object schema with child properties",
            )

    def validate_operation(self, operation: dict[str, Any], path: str, method: str) -> None:
        try:
            OperationModel.model_validate(operation)
        except ValidationError as e:
            raise SwaggerBuildError(path, method, str(e)) from e

    def derive_operation_ids(self, routes: list[NormalizedRoute]) -> dict[tuple[str, str], str]:
        """operationId for every route without an explicit one, keyed by (method, path).

        Every pair whose derived id is shared with another pair, or with an
        explicit id, gets a digest of its own method and path as suffix.
        """
        taken = {route.id for route in routes if route.id}
        groups: dict[str, set[tuple[str, str]]] = {}
        for route in routes:
            if not route.id:
                groups.setdefault(create_id(route.method, route.path), set()).add((route.method, route.path))

        out: dict[tuple[str, str], str] = {}
        clashing = []
        for operation_id, pairs in groups.items():
            if len(pairs) == 1 and operation_id not in taken:
                out[next(iter(pairs))] = operation_id
                taken.add(operation_id)
            else:
                clashing.extend((operation_id, pair) for pair in pairs)

        for operation_id, pair in sorted(clashing):
            digest = hashlib.sha1(f"{pair[0].upper()} {pair[1]}".encode("utf-8")).hexdigest()
            size = 8
            candidate = f"{operation_id}_{digest[:size]}"
            while candidate in taken and size < len(digest):
                size += 1
                candidate = f"{operation_id}_{digest[:size]}"
            out[pair] = candidate
            taken.add(candidate)
        return out


def default_structures() -> dict[str, Any]:
    return {"properties": {}, "parameters": []}


def overload(base: Any, priority: Any) -> Any:
    return priority or base


def remove_base_path(path: str, base_path: str, path_replacements: list[PathReplacement]) -> str:
    """Strip ``base_path`` from ``path`` and reapply endpoint replacements."""
    if starts_with_base_path(path, base_path):
        path = path[len(base_path.rstrip("/")):] or "/"
        path = replace_in_path(path, ["endpoints"], path_replacements)
    return path


def path_requires(path: str, name: str) -> bool:
    """True when ``{name}`` (or ``:name``) is a whole, non-optional path segment."""
    pattern = r"/(?:\{" + re.escape(name) + r"\}|:" + re.escape(name) + r")(?:$|/)"
    return re.search(pattern, path) is not None


def has_content_type_header(operation: dict[str, Any]) -> bool:
    return any(
        param.get("in") == "header" and param.get("name", "").lower() == "content-type"
        for param in operation.get("parameters", [])
    )
