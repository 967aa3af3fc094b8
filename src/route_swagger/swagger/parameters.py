"""Flatten property trees into Swagger 2.0 parameter lists."""

from typing import Any

PRIMITIVE_TYPES = ("string", "number", "integer", "boolean")

# keys a non-body parameter may not carry
_SCHEMA_ONLY = ("properties", "$ref", "x-alternatives", "example", "additionalProperties")


def from_properties(properties: dict[str, Any] | None, parameter_type: str) -> list[dict[str, Any]]:
    """Return the parameters described by ``properties`` for one location.

    ``body`` yields a single parameter carrying the whole schema; every other
    location yields one parameter per child property, in declaration order.
    """
    if not properties:
        return []
    if parameter_type == "body":
        return [_body_parameter(properties)]

    required = set(properties.get("required") or [])
    out = []
    for name, prop in (properties.get("properties") or {}).items():
        param = {"name": name, "in": parameter_type}
        param.update(from_property(prop, parameter_type))
        if name in required:
            param["required"] = True
        out.append(param)
    return out


def from_property(prop: dict[str, Any], parameter_type: str) -> dict[str, Any]:
    """Reduce one property to the fields a non-body parameter supports."""
    out = {k: v for k, v in prop.items() if k not in _SCHEMA_ONLY}
    if not isinstance(out.get("required"), bool):
        out.pop("required", None)
    if "example" in prop and "x-example" not in out:
        out["x-example"] = prop["example"]
    kind = prop.get("type")
    if kind == "object" or kind is None:
        out["type"] = "string"
    if kind == "file" and parameter_type != "formData":
        out["type"] = "string"
    if kind == "array":
        items = prop.get("items") or {}
        if items.get("type") in PRIMITIVE_TYPES:
            out["items"] = {k: v for k, v in items.items() if k not in _SCHEMA_ONLY and k != "required"}
        else:
            out["items"] = {"type": "string"}
    return out


def _body_parameter(properties: dict[str, Any]) -> dict[str, Any]:
    schema = dict(properties)
    param = {"in": "body", "name": "body", "schema": schema}
    if "description" in schema and "$ref" not in schema:
        param["description"] = schema["description"]
    return param
