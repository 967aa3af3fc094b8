"""Exceptions raised by route-swagger."""


class RouteSwaggerError(Exception):
    """Base class for all route-swagger errors."""


class ConfigError(RouteSwaggerError):
    """Settings or a route manifest could not be loaded."""


class SwaggerBuildError(RouteSwaggerError):
    """A route broke a contract the document cannot be built without."""

    def __init__(self, path: str, method: str, reason: str):
        self.path = path
        self.method = method
        self.reason = reason
        super().__init__(f"{method.upper()} {path}: {reason}")
