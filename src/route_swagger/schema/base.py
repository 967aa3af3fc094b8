"""Validation schema descriptions read by the document builder.

A ``Schema`` is a closed tagged variant: every supported shape has a
``kind`` and the builder dispatches on it. Validator functions that cannot
be described are kept as the opaque ``func`` kind.
"""

from typing import Any, Callable, Literal, get_args

from pydantic import BaseModel, ConfigDict

Kind = Literal[
    "any",
    "string",
    "number",
    "integer",
    "boolean",
    "date",
    "object",
    "array",
    "alternatives",
    "file",
    "func",
]

KINDS: tuple[str, ...] = get_args(Kind)


class Schema(BaseModel):
    """A single node of a validation schema.

    ``required`` is ``None`` when the schema does not say either way.
    ``keys`` is ``None`` for an object without declared children; an empty
    dict means the object declares that it has none.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: Kind = "any"
    label: str | None = None
    description: str | None = None
    required: bool | None = None
    enum: list[Any] | None = None
    default: Any = None
    example: Any = None
    format: str | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    keys: dict[str, "Schema"] | None = None
    items: list["Schema"] = []
    alternatives: list["Schema"] = []
    meta: dict[str, Any] = {}
    validator: Any = None

    def __repr__(self) -> str:
        # keys may be cyclic
        label = f" {self.label!r}" if self.label else ""
        return f"<Schema {self.kind}{label}>"

    __str__ = __repr__


Schema.model_rebuild()


def string(**options: Any) -> Schema:
    return Schema(kind="string", **options)


def number(**options: Any) -> Schema:
    return Schema(kind="number", **options)


def integer(**options: Any) -> Schema:
    return Schema(kind="integer", **options)


def boolean(**options: Any) -> Schema:
    return Schema(kind="boolean", **options)


def date(**options: Any) -> Schema:
    return Schema(kind="date", **options)


def any_(**options: Any) -> Schema:
    return Schema(kind="any", **options)


def file(**options: Any) -> Schema:
    return Schema(kind="file", **options)


def obj(keys: dict[str, Schema] | None = None, **options: Any) -> Schema:
    """An object schema; ``keys`` maps child names to their schemas."""
    return Schema(kind="object", keys=keys, **options)


def array(*items: Schema, **options: Any) -> Schema:
    return Schema(kind="array", items=list(items), **options)


def alternatives(*options_: Schema, **options: Any) -> Schema:
    return Schema(kind="alternatives", alternatives=list(options_), **options)


def func(validator: Callable[..., Any], **options: Any) -> Schema:
    """Wrap a validator function that has no declarative description."""
    return Schema(kind="func", validator=validator, **options)
