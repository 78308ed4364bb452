"""CLI entry point for annodoc."""

import json
import random
from pathlib import Path

import click

from annodoc.config import load_base_schema, load_settings
from annodoc.errors import AnnoDocError
from annodoc.generator.examples import ExampleSynthesizer
from annodoc.generator.pipeline import build_routes, generate_openapi
from annodoc.generator.route import RouteBuilder
from annodoc.parser.manifest import load_manifest


@click.group()
def main():
    """annodoc: generate OpenAPI documents from handler annotation tags."""
    pass


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="Settings file (YAML or JSON).")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output directory, defaults to the configured output.")
@click.option("--seed", default=None, type=int, help="Seed for generated example values.")
def generate(manifest_path: Path, config_path: Path | None, output: Path | None, seed: int | None):
    """Generate openapi.json from a route manifest."""
    try:
        settings = load_settings(config_path)
        base_schema = load_base_schema(settings.base_schema) if settings.base_schema else {}

        click.echo(f"Parsing {manifest_path}...")
        routes = load_manifest(manifest_path)
        click.echo(f"Found {len(routes)} routes.")

        click.echo("Generating OpenAPI 3.0.0 document...")
        synthesizer = ExampleSynthesizer(random.Random(seed))
        document = generate_openapi(routes, settings, base_schema, synthesizer)
    except AnnoDocError as e:
        raise click.ClickException(str(e))

    output = output or settings.output
    output.mkdir(parents=True, exist_ok=True)
    file_path = output / "openapi.json"
    file_path.write_text(json.dumps(document, indent=2, default=str), encoding="utf-8")
    click.echo(f"OpenAPI document saved to {file_path}")


@main.command("routes")
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
def list_routes(manifest_path: Path):
    """List the documentable routes of a manifest."""
    try:
        routes = load_manifest(manifest_path)
    except AnnoDocError as e:
        raise click.ClickException(str(e))

    for route in build_routes(routes, RouteBuilder()):
        auth = "auth" if route.authenticated else "public"
        click.echo(f"  {route.group}: {','.join(route.methods)} /{route.uri.lstrip('/')} ({auth})")
