"""Assembles route descriptors into one OpenAPI 3.0 document."""

import copy
from typing import Any

from annodoc.config import DocSettings
from annodoc.generator.samples import SampleRenderer
from annodoc.parser.base import CanonicalType, ParameterDescriptor, ResponseDescriptor, RouteDescriptor

OPENAPI_VERSION = "3.0.0"

OPENAPI_TYPES = {"integer", "number", "boolean", "string", "array", "object"}

TYPE_SCHEMAS = {
    CanonicalType.FLOAT.value: {"type": "number", "format": "float"},
    CanonicalType.DATE.value: {"type": "string", "format": "date-time"},
    CanonicalType.SCHEMA.value: {"type": "object"},
    "json": {"type": "object"},
}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge `override` into a copy of `base`.

    Mappings are merged key by key. Any other value from `override`,
    lists included, replaces the value in `base` wholesale.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def group_routes(routes: list[RouteDescriptor]) -> dict[str, list[RouteDescriptor]]:
    """Group descriptors by group name, in first-seen order."""
    groups: dict[str, list[RouteDescriptor]] = {}
    for route in routes:
        groups.setdefault(route.group, []).append(route)
    return groups


def type_schema(type_: str) -> dict:
    if type_ in TYPE_SCHEMAS:
        return dict(TYPE_SCHEMAS[type_])
    if type_ in OPENAPI_TYPES:
        return {"type": type_}
    # custom type names refer to component schemas
    return {"$ref": f"#/components/schemas/{type_}"}


def property_schema(param: ParameterDescriptor) -> dict:
    """OpenAPI schema for a single body or component property."""
    if param.properties and "$ref" in param.properties:
        return {"$ref": param.properties["$ref"]}

    schema = type_schema(param.type)
    if "$ref" in schema:
        return schema

    if param.properties:
        if schema.get("type") == "array":
            schema["items"] = param.properties.get("items") or {"type": "object", "properties": param.properties}
        else:
            schema["properties"] = param.properties
    if param.description:
        schema["description"] = param.description
    schema["example"] = param.value
    return schema


class DocumentAssembler:
    """Builds paths, components and metadata, then applies the base-schema override."""

    def __init__(self, settings: DocSettings, renderers: dict[str, SampleRenderer] | None = None):
        self.settings = settings
        self.renderers = renderers or {}

    def assemble(self, routes: list[RouteDescriptor], base_schema: dict | None = None) -> dict:
        groups = group_routes(routes)
        settings = self.settings

        document = {
            "openapi": OPENAPI_VERSION,
            "info": self._info(),
            "components": {
                "securitySchemes": settings.security,
                "schemas": self._component_schemas(groups),
            },
            "servers": settings.servers,
            "paths": self._paths(groups),
            "x-tagGroups": settings.tag_groups,
        }
        return deep_merge(document, base_schema or {})

    def _info(self) -> dict:
        settings = self.settings
        return {
            "title": settings.title,
            "version": settings.version,
            "description": settings.description,
            "termsOfService": settings.terms_of_service,
            "license": settings.license or None,
            "contact": settings.contact,
            "x-logo": {
                "url": settings.logo,
                "altText": settings.title,
                "backgroundColor": settings.color,
            },
        }

    # -- paths ----------------------------------------------------------------

    def _paths(self, groups: dict[str, list[RouteDescriptor]]) -> dict:
        """Map each URI to a path item holding one operation per method."""
        paths: dict[str, dict] = {}
        for group, routes in groups.items():
            for route in routes:
                item = paths.setdefault("/" + route.uri.lstrip("/"), {})
                for index, method in enumerate(route.methods):
                    item[method.lower()] = self._operation(route, group, method, index)
        return paths

    def _operation(self, route: RouteDescriptor, group: str, method: str, index: int) -> dict:
        operation: dict[str, Any] = {
            "tags": [group],
            "operationId": route.title if index == 0 else f"{route.title}_{method.lower()}",
            "description": route.description,
            "parameters": [self._parameter(p) for p in route.parameters.values() if p.location != "body"],
        }

        if route.body_parameters:
            operation["requestBody"] = self._request_body(route)

        operation["responses"] = {
            str(status): self._response(response) for status, response in route.responses.items()
        }

        if route.authenticated and self.settings.security:
            operation["security"] = [{name: []} for name in self.settings.security]

        operation["x-code-samples"] = [
            {"lang": name, "source": render(route)} for name, render in self.renderers.items()
        ]
        return operation

    def _parameter(self, param: ParameterDescriptor) -> dict:
        schema = type_schema(param.type)
        if "$ref" not in schema:
            schema["example"] = param.value
        return {
            "in": param.location,
            "name": param.name,
            "description": param.description,
            "required": param.required,
            "schema": schema,
        }

    def _request_body(self, route: RouteDescriptor) -> dict:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: property_schema(p) for name, p in route.body_parameters.items()},
        }
        required = [name for name, p in route.body_parameters.items() if p.required]
        if required:
            schema["required"] = required
        return {
            "required": True,
            "description": "",
            "content": {"application/json": {"schema": schema}},
        }

    def _response(self, response: ResponseDescriptor) -> dict:
        if response.status == 204:
            return {"description": response.description, "content": {}}

        if response.schema_ref is not None:
            schema = response.schema_ref
        else:
            schema = {
                "type": "object",
                "properties": response.content or {},
                "example": response.example if response.example is not None else {},
            }
        return {
            "description": response.description,
            "content": {"application/json": {"schema": schema}},
        }

    # -- components -----------------------------------------------------------

    def _component_schemas(self, groups: dict[str, list[RouteDescriptor]]) -> dict:
        """Named schemas for the body parameters of schema-bearing groups."""
        schemas = {}
        for group in self.settings.schema_groups:
            for route in groups.get(group, []):
                schemas[route.title] = self._component_schema(route)
        return schemas

    def _component_schema(self, route: RouteDescriptor) -> dict:
        params = route.body_parameters
        schema: dict[str, Any] = {"type": "object"}

        required = [name for name, p in params.items() if p.required]
        if required:
            schema["required"] = required
        if params:
            schema["properties"] = {name: property_schema(p) for name, p in params.items()}
            schema["example"] = {name: p.value for name, p in params.items()}
        return schema
