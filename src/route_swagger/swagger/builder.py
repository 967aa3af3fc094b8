"""Assemble a complete Swagger 2.0 document."""

from typing import Any

from route_swagger.routes import RouteDescriptor
from route_swagger.settings import Settings
from route_swagger.swagger.paths import Paths
from route_swagger.utilities import delete_empty_properties

METHOD_ORDER = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


def build_swagger(routes: list[RouteDescriptor], settings: Settings | None = None) -> dict[str, Any]:
    """Translate ``routes`` into a Swagger document.

    Each call starts from empty definitions; the same routes and settings
    always produce the same document.
    """
    settings = settings or Settings()
    result = Paths(settings).build(sort_routes(routes, settings.sort_endpoints))

    swagger = {
        "swagger": "2.0",
        "host": settings.host,
        "basePath": settings.base_path,
        "schemes": settings.schemes,
        "info": settings.info.model_dump(by_alias=True, exclude_none=True),
        "tags": settings.tags,
        "securityDefinitions": settings.security_definitions,
        "security": settings.security,
        "paths": result["paths"],
        "definitions": result["definitions"],
        "x-alt-definitions": result["x-alt-definitions"],
    }
    paths = swagger["paths"]
    swagger = delete_empty_properties(swagger)
    swagger["paths"] = paths
    return swagger


def sort_routes(routes: list[RouteDescriptor], sort_endpoints: str) -> list[RouteDescriptor]:
    """Order routes so the ``paths`` mapping is built in a stable order."""
    if sort_endpoints == "ordered":
        return sorted(routes, key=lambda r: (r.order is None, r.order or 0))
    if sort_endpoints == "method":
        return sorted(routes, key=lambda r: (_method_rank(r.method), r.path))
    return sorted(routes, key=lambda r: (r.path, _method_rank(r.method)))


def _method_rank(method: str) -> int:
    method = method.upper()
    return METHOD_ORDER.index(method) if method in METHOD_ORDER else len(METHOD_ORDER)
