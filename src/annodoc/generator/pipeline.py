"""One generation run: routes in, OpenAPI document out."""

import click

from annodoc.config import DocSettings
from annodoc.errors import MalformedTagError, UnresolvedPathParameterError
from annodoc.generator.document import DocumentAssembler
from annodoc.generator.examples import ExampleSynthesizer
from annodoc.generator.route import RouteBuilder, describe_route
from annodoc.generator.samples import build_sample_renderers
from annodoc.parser.base import RouteDescriptor, RouteInput


def build_routes(routes: list[RouteInput], builder: RouteBuilder) -> list[RouteDescriptor]:
    """Build every route, skipping the ones that fail or carry no tags."""
    descriptors = []
    for route in routes:
        try:
            descriptor = builder.build(route)
        except (MalformedTagError, UnresolvedPathParameterError) as e:
            click.echo(f"Skipping route: {describe_route(route)}: {e}", err=True)
            continue

        if descriptor is None:
            click.echo(f"Skipping route: {describe_route(route)}: no annotation tags", err=True)
            continue

        descriptors.append(descriptor)
        click.echo(f"Processed route: {describe_route(route)}")
    return descriptors


def generate_openapi(
    routes: list[RouteInput],
    settings: DocSettings,
    base_schema: dict | None = None,
    synthesizer: ExampleSynthesizer | None = None,
) -> dict:
    """Build all routes and assemble the final document."""
    renderers = build_sample_renderers(settings.language_tabs, settings.base_url)
    builder = RouteBuilder(synthesizer, default_group=settings.default_group)
    descriptors = build_routes(routes, builder)
    return DocumentAssembler(settings, renderers).assemble(descriptors, base_schema)
