"""Coerce heterogeneous validation inputs into ``Schema`` trees.

Routes may describe validation with ``Schema`` builders, pydantic models,
plain Python types, manifest mappings or bare validator functions. Every
one of them ends up as a ``Schema``; anything unrecognised becomes the
opaque ``func`` kind rather than an error.
"""

import datetime
import enum
import inspect
import types
import typing
from typing import Any, Literal, Union

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticUndefined

from route_swagger.schema.base import KINDS, Schema

TYPE_KINDS = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    tuple: "array",
    set: "array",
    dict: "object",
    datetime.date: "date",
    datetime.datetime: "date",
}

KIND_ALIASES = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
    "list": "array",
    "dict": "object",
    "datetime": "date",
}

# camelCase manifest key -> Schema field name
_DESCRIPTOR_FIELDS = {to_camel(name): name for name in Schema.model_fields}
_DESCRIPTOR_FIELDS.update({name: name for name in Schema.model_fields})
_DESCRIPTOR_KEYS = {"type", "meta", "swaggerType", *_DESCRIPTOR_FIELDS}


def to_schema(value: Any) -> Schema | None:
    """Return the canonical schema for ``value``; ``None`` stays ``None``."""
    return _coerce(value, {})


def _coerce(value: Any, memo: dict[type, Schema]) -> Schema | None:
    if value is None:
        return None
    if isinstance(value, Schema):
        return value
    if inspect.isclass(value):
        if issubclass(value, BaseModel):
            return _from_model(value, memo)
        if issubclass(value, enum.Enum):
            return _from_enum(value)
        if value in TYPE_KINDS:
            return Schema(kind=TYPE_KINDS[value])
    if isinstance(value, dict):
        if _is_descriptor(value):
            try:
                return _from_descriptor(value, memo)
            except (ValidationError, TypeError, ValueError, AttributeError):
                return Schema(kind="func", validator=value)
        return Schema(kind="object", keys={str(k): _child(v, memo) for k, v in value.items()})
    if isinstance(value, str) and _kind_name(value):
        return Schema(kind=_kind_name(value))
    origin = typing.get_origin(value)
    if origin is not None:
        return _from_annotation(value, memo)
    return Schema(kind="func", validator=value)


def _child(value: Any, memo: dict[type, Schema]) -> Schema:
    return _coerce(value, memo) or Schema(kind="any")


def _is_descriptor(data: dict) -> bool:
    """A mapping that describes one schema rather than listing child fields."""
    if not _kind_name(data.get("type")):
        return False
    return all(key in _DESCRIPTOR_KEYS for key in data)


def _kind_name(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    name = KIND_ALIASES.get(value, value)
    return name if name in KINDS else None


def _from_descriptor(data: dict, memo: dict[type, Schema]) -> Schema:
    fields: dict[str, Any] = {"kind": _kind_name(data["type"])}
    meta = dict(data.get("meta") or {})
    for key, value in data.items():
        if key in ("type", "meta"):
            continue
        name = _DESCRIPTOR_FIELDS.get(key)
        if name is None or name == "kind":
            meta[key] = value
        elif name == "keys":
            fields["keys"] = {str(k): _child(v, memo) for k, v in (value or {}).items()}
        elif name in ("items", "alternatives"):
            values = value if isinstance(value, list) else [value]
            fields[name] = [_child(v, memo) for v in values]
        else:
            fields[name] = value
    fields["meta"] = meta
    return Schema(**fields)


def _from_enum(enum_cls: type[enum.Enum]) -> Schema:
    values = [member.value for member in enum_cls]
    return Schema(kind=_kind_of_value(values[0]) if values else "string", enum=values)


def _kind_of_value(value: Any) -> str:
    for py_type, kind in TYPE_KINDS.items():
        if type(value) is py_type:
            return kind
    return "any"


def _from_model(model: type[BaseModel], memo: dict[type, Schema]) -> Schema:
    if model in memo:
        return memo[model]
    schema = Schema(kind="object", label=model.__name__, keys={})
    if model.__doc__:
        schema.description = inspect.cleandoc(model.__doc__)
    memo[model] = schema
    for name, field in model.model_fields.items():
        child = _from_annotation(field.annotation, memo).model_copy()
        child.required = field.is_required()
        if field.description:
            child.description = field.description
        if field.default is not PydanticUndefined and field.default is not None:
            child.default = _plain(field.default)
        if field.examples:
            child.example = field.examples[0]
        schema.keys[field.alias or name] = child
    return schema


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def _from_annotation(annotation: Any, memo: dict[type, Schema]) -> Schema:
    if annotation is None or annotation is Any:
        return Schema(kind="any")
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is Union or origin is types.UnionType:
        options = [a for a in args if a is not type(None)]
        if len(options) == 1:
            return _from_annotation(options[0], memo)
        return Schema(kind="alternatives", alternatives=[_from_annotation(a, memo) for a in options])
    if origin is Literal:
        values = list(args)
        return Schema(kind=_kind_of_value(values[0]) if values else "string", enum=values)
    if origin in (list, set, tuple, frozenset):
        items = [_from_annotation(a, memo) for a in args if a is not Ellipsis][:1]
        return Schema(kind="array", items=items)
    if origin is dict:
        return Schema(kind="object")
    return _coerce(annotation, memo) or Schema(kind="any")


def has_children(schema: Schema | None) -> bool:
    """True for an object schema that declares its child keys."""
    return schema is not None and schema.kind == "object" and schema.keys is not None


def is_validator_function(schema: Schema | None) -> bool:
    return schema is not None and schema.kind == "func"


def has_file_type(schema: Schema | None) -> bool:
    """True when a file upload appears anywhere inside ``schema``."""
    seen: set[int] = set()
    stack = [schema] if schema is not None else []
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if node.kind == "file" or node.meta.get("swaggerType") == "file":
            return True
        stack.extend((node.keys or {}).values())
        stack.extend(node.items)
        stack.extend(node.alternatives)
    return False
