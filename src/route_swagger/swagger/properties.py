"""Convert ``Schema`` trees into Swagger 2.0 property descriptions."""

from typing import Any

from route_swagger.schema.base import Schema
from route_swagger.settings import Settings
from route_swagger.swagger.definitions import Definitions
from route_swagger.utilities import delete_empty_properties

TYPE_MAP = {
    "any": "string",
    "string": "string",
    "date": "string",
    "number": "number",
    "integer": "integer",
    "boolean": "boolean",
    "file": "file",
    "object": "object",
    "array": "array",
}

MULTI_COLLECTION = ("query", "formData")


class Properties:
    """Builds property trees and lifts reusable objects into definitions.

    One instance serves a single document build. ``cache`` holds the two
    deduplication maps, one for ``definitions`` and one for
    ``x-alt-definitions``.
    """

    def __init__(
        self,
        settings: Settings,
        definitions: dict[str, Any],
        alt_definitions: dict[str, Any],
        cache: list[dict[str, str]] | None = None,
    ):
        cache = cache if cache is not None else [{}, {}]
        self.settings = settings
        self.definitions = Definitions(settings, definitions, cache[0], "definitions")
        self.alt_definitions = Definitions(settings, alt_definitions, cache[1], "x-alt-definitions")
        # id(schema) -> [store, reserved name] for objects being parsed
        self._parsing: dict[int, list] = {}
        self._active: set[int] = set()

    def parse_property(
        self,
        name: str | None,
        schema: Schema | None,
        parent: Schema | None,
        parameter_type: str,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any] | None:
        """Describe ``schema`` for the ``parameter_type`` location.

        Returns ``None`` when the schema cannot be described at all.
        """
        if schema is None:
            return None
        if schema.kind == "func":
            self.settings.log(
                ["validation", "warning"],
                f"The property {_path_of(name, parent)} uses a validator function and has been skipped",
            )
            return None
        if schema.kind == "object":
            return self.parse_object(name, schema, parameter_type, use_definitions, is_alt)

        if id(schema) in self._active:
            self.settings.log(
                ["validation", "warning"],
                f"The property {_path_of(name, parent)} refers to itself and has been cut short",
            )
            return {"type": TYPE_MAP.get(schema.kind, "string")}
        self._active.add(id(schema))
        try:
            if schema.kind == "array":
                return self.parse_array(name, schema, parameter_type, use_definitions, is_alt)
            if schema.kind == "alternatives":
                return self.parse_alternatives(name, schema, parent, parameter_type, use_definitions, is_alt)
            return self.parse_primitive(schema, parameter_type)
        finally:
            self._active.discard(id(schema))

    def parse_primitive(self, schema: Schema, parameter_type: str) -> dict[str, Any]:
        out = {"type": TYPE_MAP[schema.kind]}
        if schema.kind == "date":
            out["format"] = "date-time"
        if schema.format:
            out["format"] = schema.format
        out.update(
            pattern=schema.pattern,
            minLength=schema.min_length,
            maxLength=schema.max_length,
            minimum=schema.minimum,
            maximum=schema.maximum,
        )
        out.update(self._common(schema, parameter_type))
        return delete_empty_properties(out)

    def parse_array(
        self,
        name: str | None,
        schema: Schema,
        parameter_type: str,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any]:
        items = None
        if schema.items:
            items = self.parse_property(name, schema.items[0], schema, parameter_type, use_definitions, is_alt)
        out = {
            "type": "array",
            "items": items or {"type": "string"},
            "minItems": schema.min_length,
            "maxItems": schema.max_length,
        }
        if parameter_type in MULTI_COLLECTION:
            out["collectionFormat"] = "multi"
        out.update(self._common(schema, parameter_type))
        return delete_empty_properties(out)

    def parse_alternatives(
        self,
        name: str | None,
        schema: Schema,
        parent: Schema | None,
        parameter_type: str,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any] | None:
        if not schema.alternatives:
            return self.parse_primitive(schema.model_copy(update={"kind": "any"}), parameter_type)
        first = self.parse_property(name, schema.alternatives[0], parent, parameter_type, use_definitions, is_alt)
        if first is None:
            return None
        out = dict(first)
        if "$ref" not in out and schema.description:
            out["description"] = schema.description
        if use_definitions:
            options = [
                self.parse_property(name, option, parent, parameter_type, use_definitions, True)
                for option in schema.alternatives
            ]
            out["x-alternatives"] = [option for option in options if option]
        return out

    def parse_object(
        self,
        name: str | None,
        schema: Schema,
        parameter_type: str,
        use_definitions: bool,
        is_alt: bool,
    ) -> dict[str, Any]:
        store = self.alt_definitions if is_alt else self.definitions
        key = id(schema)
        if key in self._parsing:
            return self._back_reference(name, schema, use_definitions)

        self._parsing[key] = [store, None]
        properties: dict[str, Any] = {}
        required: list[str] = []
        try:
            for child_name, child in (schema.keys or {}).items():
                prop = self.parse_property(child_name, child, schema, parameter_type, use_definitions, is_alt)
                if prop is None:
                    continue
                if child.required:
                    required.append(child_name)
                if parameter_type != "body" and child.required is not None:
                    prop = {**prop, "required": child.required}
                properties[child_name] = prop
        finally:
            reserved = self._parsing.pop(key)[1]

        out = delete_empty_properties({
            "type": "object",
            "description": schema.description,
            "properties": properties,
            "required": required,
        })
        if reserved:
            store.fill(reserved, out)
            return {"$ref": store.ref(reserved)}
        if not use_definitions or (schema.keys is None and not schema.label):
            out.update(self._common(schema, parameter_type))
            return delete_empty_properties(out)
        return {"$ref": store.ref(store.append(schema.label, out))}

    def _back_reference(self, name: str | None, schema: Schema, use_definitions: bool) -> dict[str, Any]:
        entry = self._parsing[id(schema)]
        if not use_definitions:
            self.settings.log(
                ["validation", "warning"],
                f"The property {name or schema.label or 'object'} is circular and is shown as a plain object",
            )
            return {"type": "object"}
        store = entry[0]
        if entry[1] is None:
            entry[1] = store.reserve(schema.label)
        return {"$ref": store.ref(entry[1])}

    def _common(self, schema: Schema, parameter_type: str) -> dict[str, Any]:
        out = {
            "description": schema.description,
            "enum": schema.enum,
            "default": schema.default,
        }
        if schema.meta.get("swaggerType"):
            out["type"] = schema.meta["swaggerType"]
        if schema.example is not None:
            out["example" if parameter_type == "body" else "x-example"] = schema.example
        return out


def _path_of(name: str | None, parent: Schema | None) -> str:
    name = name or "root"
    if parent is not None and parent.label:
        return f"{parent.label}.{name}"
    return name
