"""CLI entry point for route-swagger."""

import json
from pathlib import Path

import click
import yaml

from route_swagger.errors import RouteSwaggerError
from route_swagger.routes import load_routes
from route_swagger.settings import Settings
from route_swagger.swagger.builder import build_swagger


def _load_settings(config: Path | None, **overrides) -> Settings:
    """Read settings from a file if given, else start from defaults."""
    if config is not None:
        return Settings.from_yaml(config, **overrides)
    return Settings.model_validate({k: v for k, v in overrides.items() if v is not None})


def _echo_diagnostics(settings: Settings) -> None:
    for tags, message in settings.diagnostics.entries:
        click.echo(f"[{','.join(tags)}] {message}", err=True)


@click.group()
def main():
    """route-swagger — build Swagger documents from route descriptors."""
    pass


@main.command()
@click.argument("routes_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the Swagger document.")
@click.option("--config", type=click.Path(exists=True, path_type=Path), default=None, help="Settings file (YAML or JSON).")
@click.option("--base-path", default=None, help="Base path stripped from every route.")
@click.option("--payload-type", default=None, type=click.Choice(["json", "form"]), help="Default payload encoding.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
def build(routes_path: Path, output: Path, config: Path | None, base_path: str | None, payload_type: str | None, fmt: str):
    """Build a Swagger document from a route manifest."""
    try:
        settings = _load_settings(config, base_path=base_path, payload_type=payload_type)
        routes = load_routes(routes_path)
        click.echo(f"Found {len(routes)} routes.")
        swagger = build_swagger(routes, settings)
    except RouteSwaggerError as e:
        raise click.ClickException(str(e))

    _echo_diagnostics(settings)

    if fmt == "yaml":
        text = yaml.safe_dump(swagger, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(swagger, indent=2, ensure_ascii=False) + "\n"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")

    definitions = len(swagger.get("definitions", {}))
    click.echo(f"Wrote {output} ({len(swagger['paths'])} paths, {definitions} definitions)")


@main.command()
@click.argument("routes_path", type=click.Path(exists=True, path_type=Path))
@click.option("--config", type=click.Path(exists=True, path_type=Path), default=None, help="Settings file (YAML or JSON).")
def check(routes_path: Path, config: Path | None):
    """Build without writing and report problems; exit 1 on errors."""
    try:
        settings = _load_settings(config)
        build_swagger(load_routes(routes_path), settings)
    except RouteSwaggerError as e:
        raise click.ClickException(str(e))

    _echo_diagnostics(settings)
    errors = len(settings.diagnostics.errors)
    warnings = len(settings.diagnostics.warnings)
    click.echo(f"{errors} errors, {warnings} warnings")
    if errors:
        raise SystemExit(1)
