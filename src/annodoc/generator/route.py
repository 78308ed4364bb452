"""Builds one RouteDescriptor per documented route."""

import hashlib
import re
from typing import Any

from annodoc.errors import MalformedTagError, UnresolvedPathParameterError
from annodoc.generator.examples import ExampleSynthesizer
from annodoc.parser.base import (
    AnnotationTag,
    CanonicalType,
    ParameterDescriptor,
    ResponseDescriptor,
    RouteDescriptor,
    RouteInput,
)
from annodoc.parser.tags import parse_parameter_tag, parse_response_tag, parse_return_tag
from annodoc.parser.types import normalize_type

DEFAULT_GROUP = "general"

# {id}, {id?} and {id:int} style path variables
PATH_VARIABLE_RE = re.compile(r"\{(\w+)\??(?::[^}]*)?\}")

# Parameter names whose properties are folded into the parent
COMPOSITION_KEYS = ("allOf",)


def get_methods(route: RouteInput) -> list[str]:
    return [m.upper() for m in route.methods if m.upper() != "HEAD"]


def describe_route(route: RouteInput) -> str:
    return f"[{','.join(get_methods(route))}] {route.uri}"


def route_id(uri: str, methods: list[str]) -> str:
    """Stable identifier for an endpoint signature."""
    return hashlib.md5(f"{uri}:{''.join(methods)}".encode("utf-8")).hexdigest()


class RouteBuilder:
    """Resolves parameters, body, responses and auth for a route."""

    def __init__(self, synthesizer: ExampleSynthesizer | None = None, default_group: str = DEFAULT_GROUP):
        self.synthesizer = synthesizer or ExampleSynthesizer()
        self.default_group = default_group

    def build(self, route: RouteInput) -> RouteDescriptor | None:
        """Build the descriptor, or None when the handler carries no tags."""
        if not route.tags:
            return None

        methods = get_methods(route)
        title = re.split(r"[@.:]", route.handler)[-1]
        authenticated = self._is_authenticated(route.tags)

        parameters = self._path_parameters(route, title)
        parameters.update(self._tag_parameters(route.tags, "queryParam", "query"))

        return RouteDescriptor(
            id=route_id(route.uri, methods),
            group=self._group(route),
            title=title,
            description=route.long_description or route.short_description,
            methods=methods,
            uri=route.uri,
            parameters=parameters,
            body_parameters=self._body_parameters(route),
            authenticated=authenticated,
            responses=self._responses(route.tags),
            headers=self._headers(route.headers, authenticated),
        )

    def _group(self, route: RouteInput) -> str:
        # @group on the handler wins over the controller group
        for tag in route.tags:
            if tag.name == "group" and tag.content.strip():
                return tag.content.strip()
        return route.controller_group or self.default_group

    def _is_authenticated(self, tags: list[AnnotationTag]) -> bool:
        return any(tag.name.lower() == "authenticated" for tag in tags)

    def _headers(self, headers: dict[str, str], authenticated: bool) -> dict[str, str]:
        if authenticated:
            return dict(headers)
        return {k: v for k, v in headers.items() if k.lower() != "authorization"}

    # -- parameters -----------------------------------------------------------

    def _path_parameters(self, route: RouteInput, title: str) -> dict[str, ParameterDescriptor]:
        arguments = {arg.name: arg for arg in route.arguments}
        parameters = {}
        for name in PATH_VARIABLE_RE.findall(route.uri):
            if name not in arguments:
                raise UnresolvedPathParameterError(name, title)
            type_ = normalize_type(arguments[name].type)
            parameters[name] = ParameterDescriptor(
                name=name,
                type=type_,
                location="path",
                required=True,
                value=self.synthesizer.synthesize(type_),
            )
        return parameters

    def _body_parameters(self, route: RouteInput) -> dict[str, ParameterDescriptor]:
        if route.input_fields is None:
            return self._tag_parameters(route.tags, "bodyParam", "body")

        parameters = {}
        for field in route.input_fields:
            type_ = normalize_type(field.type)
            parameters[field.name] = ParameterDescriptor(
                name=field.name,
                type=type_,
                location="body",
                required=True,
                value=self.synthesizer.synthesize(type_),
            )
        return parameters

    def _tag_parameters(self, tags: list[AnnotationTag], tag_name: str, location: str) -> dict[str, ParameterDescriptor]:
        parameters: dict[str, ParameterDescriptor] = {}
        for tag in tags:
            if tag.name != tag_name:
                continue
            parsed = parse_parameter_tag(tag.name, tag.content)

            if parsed.name in COMPOSITION_KEYS:
                for name, node in (parsed.properties or {}).items():
                    parameters[name] = self._from_property(tag.name, name, node, location)
                continue

            value = parsed.example
            if value is None:
                value = self.synthesizer.value_for(parsed.type, parsed.properties)

            parameters[parsed.name] = ParameterDescriptor(
                name=parsed.name,
                type=parsed.type,
                location=location,
                required=parsed.required,
                description=parsed.description,
                value=value,
                properties=parsed.properties,
            )
        return parameters

    def _from_property(self, tag: str, name: str, node: Any, location: str) -> ParameterDescriptor:
        """Turn one entry of a property block into a parameter."""
        if node is None or isinstance(node, str):
            node = {"type": node}
        elif not isinstance(node, dict):
            raise MalformedTagError(tag, f"property {name} must be a type name or key map, got {node!r}")

        nested = node.get("properties")
        if nested is None and isinstance(node.get("items"), dict):
            nested = {"items": node["items"]}
        elif nested is not None and not isinstance(nested, dict):
            raise MalformedTagError(tag, f"properties of {name} must be a key map")

        type_ = normalize_type(node.get("type") or (CanonicalType.OBJECT.value if nested else None))
        if "example" in node:
            value = node["example"]
        else:
            value = self.synthesizer.value_for(type_, nested)

        return ParameterDescriptor(
            name=name,
            type=type_,
            location=location,
            required=bool(node.get("required", False)),
            description=str(node.get("description") or ""),
            value=value,
            properties=nested,
        )

    # -- responses ------------------------------------------------------------

    def _responses(self, tags: list[AnnotationTag]) -> dict[int, ResponseDescriptor]:
        responses = {}
        for tag in tags:
            if tag.name == "response":
                response = self._with_example(parse_response_tag(tag.name, tag.content))
                responses[response.status] = response

        if not responses:
            for tag in tags:
                if tag.name == "return":
                    response = parse_return_tag(tag.name, tag.content)
                    responses[response.status] = response

        return responses

    def _with_example(self, response: ResponseDescriptor) -> ResponseDescriptor:
        if response.status == 204:
            return response.model_copy(update={"content": None, "example": None})
        if response.example is not None:
            return response
        example = self.synthesizer.composite(response.content) if response.content else {}
        return response.model_copy(update={"example": example})
