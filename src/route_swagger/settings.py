"""Options for one translation of routes into a Swagger document."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel

from route_swagger.diagnostics import Diagnostics
from route_swagger.errors import ConfigError


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PathReplacement(_CamelModel):
    """A regex substitution applied to route paths or group names."""

    replace_in: Literal["endpoints", "groups", "all"] = "all"
    pattern: str
    replacement: str = ""


class Info(_CamelModel):
    title: str = "API documentation"
    version: str = "0.0.1"
    description: str | None = None
    terms_of_service: str | None = None
    contact: dict | None = None
    license: dict | None = None


class Settings(_CamelModel):
    """Read-only configuration consumed by the document builder."""

    base_path: str = "/"
    path_prefix_size: int = 1
    path_replacements: list[PathReplacement] = []
    payload_type: Literal["json", "form"] = "json"
    consumes: list[str] | None = None
    produces: list[str] | None = None
    accept_to_produce: bool = True
    definition_prefix: Literal["default", "useLabel"] = "default"
    reuse_definitions: bool = True
    sort_endpoints: Literal["alpha", "method", "ordered"] = "alpha"

    info: Info = Field(default_factory=Info)
    host: str | None = None
    schemes: list[str] | None = None
    tags: list[dict[str, Any]] | None = None
    security_definitions: dict[str, Any] | None = None
    security: list[dict[str, Any]] | None = None

    _diagnostics: Diagnostics = PrivateAttr(default_factory=Diagnostics)

    @property
    def diagnostics(self) -> Diagnostics:
        return self._diagnostics

    def log(self, tags: list[str], message: str) -> None:
        """Record a diagnostic; never raises."""
        self._diagnostics.log(tags, message)

    @classmethod
    def from_yaml(cls, file_path: Path, **overrides: Any) -> "Settings":
        """Load settings from a YAML or JSON file, then apply overrides."""
        try:
            data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read settings from {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {file_path} must contain a mapping")
        data.update({to_camel(k): v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {file_path}: {e}") from e
