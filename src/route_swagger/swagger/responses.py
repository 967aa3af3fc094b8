"""Build the ``responses`` map of one operation."""

from http import HTTPStatus
from typing import Any

from route_swagger.schema.base import Schema
from route_swagger.schema.ingest import has_children, to_schema
from route_swagger.settings import Settings
from route_swagger.swagger.properties import Properties
from route_swagger.utilities import delete_empty_properties


class Responses:
    """Turns response schemas into Swagger response objects.

    Shares its ``Properties`` (and so its definitions) with the rest of the
    document build.
    """

    def __init__(
        self,
        settings: Settings,
        definitions: dict[str, Any],
        alt_definitions: dict[str, Any],
        cache: list[dict[str, str]] | None = None,
        properties: Properties | None = None,
    ):
        self.settings = settings
        self.properties = properties or Properties(settings, definitions, alt_definitions, cache)

    def build(
        self,
        user_schemas: dict[Any, dict[str, Any]] | None,
        default_schema: Any,
        status_schemas: dict[Any, Any] | None,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any]:
        """Combine status schemas, the default schema and user response docs."""
        statuses = {str(code): schema for code, schema in (status_schemas or {}).items()}
        if default_schema is not None and "200" not in statuses:
            statuses = {"200": default_schema, **statuses}

        out: dict[str, dict[str, Any]] = {}
        for code, schema in statuses.items():
            out[code] = self.get_response(code, to_schema(schema), None, use_definitions, is_alt)

        for code, doc in (user_schemas or {}).items():
            code = str(code)
            doc = doc or {}
            response = self.get_response(
                code, to_schema(doc.get("schema")), doc.get("headers"), use_definitions, is_alt
            )
            merged = dict(out.get(code) or {"description": response["description"]})
            merged.update({k: response[k] for k in ("schema", "headers") if response[k]})
            if doc.get("description"):
                merged["description"] = doc["description"]
            out[code] = merged

        if "200" in out and not out["200"].get("schema"):
            out["200"]["schema"] = {"type": "string"}
        if not out:
            out["default"] = {"schema": {"type": "string"}, "description": "Successful"}
        return {code: delete_empty_properties(response) for code, response in out.items()}

    def get_response(
        self,
        status_code: str,
        schema: Schema | None,
        headers: Any,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any]:
        prop = self.properties.parse_property(None, schema, None, "body", use_definitions, is_alt)
        description = schema.description if schema is not None else None
        return {
            "description": description or _status_phrase(status_code),
            "schema": prop,
            "headers": self.get_headers(to_schema(headers)),
        }

    def get_headers(self, schema: Schema | None) -> dict[str, Any] | None:
        if not has_children(schema):
            return None
        out = {}
        for name, child in schema.keys.items():
            prop = self.properties.parse_property(name, child, schema, "header", False, False)
            if prop:
                out[name] = {k: v for k, v in prop.items() if k != "required"}
        return out


def _status_phrase(status_code: str) -> str:
    try:
        return HTTPStatus(int(status_code)).phrase
    except ValueError:
        return "Successful"
