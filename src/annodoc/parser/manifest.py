"""Route manifest parser.

A manifest lists the documentable routes of an application together with
the annotation tags of each handler, in YAML or JSON:

    routes:
      - uri: users/{id}
        methods: [GET, HEAD]
        handler: UserController@show
        group: Users
        summary: Fetch a user
        arguments: {id: int}
        apply:
          headers: {Authorization: "Bearer {token}"}
        tags:
          - "@authenticated"
          - "@response 200 {\"id\": 1}"
"""

import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from annodoc.errors import ConfigError
from .base import AnnotationTag, HandlerArgument, RouteInput

HIDDEN_TAG = "hideFromAPIDocumentation"

_TAG_RE = re.compile(r"^@?(\S+)\s*(.*)$", re.DOTALL)


def load_manifest(file_path: Path) -> list[RouteInput]:
    """Parse a route manifest file into a list of RouteInput."""
    try:
        doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read route manifest {file_path}: {e}")

    if isinstance(doc, dict):
        items = doc.get("routes") or []
    elif isinstance(doc, list):
        items = doc
    else:
        raise ConfigError(f"route manifest {file_path} must hold a list of routes")

    routes = []
    for item in items:
        route = _parse_route(item)
        if any(tag.name == HIDDEN_TAG for tag in route.tags):
            continue
        routes.append(route)
    return routes


def _parse_route(item: dict) -> RouteInput:
    if not isinstance(item, dict):
        raise ConfigError(f"route entry must be a mapping, got {item!r}")

    methods = item.get("methods", ["GET"])
    if isinstance(methods, str):
        methods = [methods]
    input_fields = item.get("input")

    try:
        return RouteInput(
            uri=item["uri"],
            methods=methods,
            handler=item.get("handler", ""),
            controller_group=item.get("group"),
            short_description=item.get("summary", ""),
            long_description=item.get("description", ""),
            tags=[_parse_tag(tag) for tag in item.get("tags") or []],
            arguments=_parse_arguments(item.get("arguments")),
            input_fields=None if input_fields is None else _parse_arguments(input_fields),
            headers=(item.get("apply") or {}).get("headers") or {},
        )
    except (KeyError, ValidationError) as e:
        raise ConfigError(f"invalid route entry {item.get('uri', '?')}: {e}")


def _parse_tag(tag: str | dict) -> AnnotationTag:
    """Accept either '@name content' strings or {name, content} mappings."""
    if isinstance(tag, dict):
        return AnnotationTag(name=tag["name"], content=tag.get("content") or "")
    match = _TAG_RE.match(str(tag).strip())
    if not match:
        raise ConfigError("empty annotation tag in manifest")
    return AnnotationTag(name=match.group(1), content=match.group(2))


def _parse_arguments(arguments: dict | list | None) -> list[HandlerArgument]:
    if not arguments:
        return []
    if isinstance(arguments, dict):
        return [HandlerArgument(name=name, type=type_) for name, type_ in arguments.items()]
    return [HandlerArgument(**arg) if isinstance(arg, dict) else HandlerArgument(name=arg) for arg in arguments]
