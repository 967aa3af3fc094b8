"""Route descriptors: the input of the document builder.

Routes are usually built in code, but can also be read from a YAML/JSON
manifest where schemas use the mapping form understood by ``to_schema``.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from route_swagger.errors import ConfigError
from route_swagger.schema.base import Schema


class _RouteModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class Validate(_RouteModel):
    """Validation schemas per request location; any may be absent."""

    query: Any = None
    params: Any = None
    headers: Any = None
    payload: Any = None


class ResponseSpec(_RouteModel):
    response_schema: Any = Field(None, alias="schema")
    status: dict[Any, Any] | None = None


class RouteDescriptor(_RouteModel):
    """One HTTP endpoint as registered with the web framework."""

    path: str
    method: str
    id: str | None = None
    summary: str | None = None
    description: str | list[str] | None = None
    tags: list[str] | None = None
    validation: Validate = Field(default_factory=Validate, alias="validate")
    response: ResponseSpec = Field(default_factory=ResponseSpec)
    responses: dict[Any, dict[str, Any]] | None = None
    consumes: list[str] | None = None
    produces: list[str] | None = None
    payload_type: str | None = None
    security: list[dict[str, Any]] | None = None
    order: int | None = None
    deprecated: bool | None = None
    group: list[str] | None = None


class NormalizedRoute(_RouteModel):
    """A route after path replacement and schema coercion."""

    path: str
    method: str
    id: str | None = None
    summary: str | None = None
    description: str | list[str] | None = None
    tags: list[str] | None = None
    query_params: Schema | None = None
    path_params: Schema | None = None
    header_params: Schema | None = None
    payload_params: Schema | None = None
    response_schema: Any = None
    response_status: dict[Any, Any] | None = None
    responses: dict[Any, dict[str, Any]] | None = None
    consumes: list[str] | None = None
    produces: list[str] | None = None
    payload_type: str | None = None
    security: list[dict[str, Any]] | None = None
    order: int | None = None
    deprecated: bool | None = None
    groups: list[str] = []


def load_routes(file_path: Path) -> list[RouteDescriptor]:
    """Read route descriptors from a YAML or JSON manifest.

    The manifest is either a list of routes or a mapping with a ``routes`` key.
    """
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read routes from {file_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("routes")
    if not isinstance(data, list):
        raise ConfigError(f"{file_path} does not contain a list of routes")

    routes = []
    for index, item in enumerate(data):
        try:
            routes.append(RouteDescriptor.model_validate(item))
        except ValidationError as e:
            raise ConfigError(f"Route #{index + 1} in {file_path} is invalid: {e}") from e
    return routes
