"""Data models shared by the annotation parser and the document generator.

The manifest loader produces RouteInput objects; the route builder turns
each into a RouteDescriptor that the document assembler consumes.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class CanonicalType(str, Enum):
    """Normalized parameter types."""

    INTEGER = "integer"
    NUMBER = "number"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    DATE = "date"
    SCHEMA = "schema"


class AnnotationTag(BaseModel):
    """A single `@name content` directive from a handler doc comment."""

    name: str
    content: str = ""


class HandlerArgument(BaseModel):
    """A declared handler argument or structured-input field."""

    name: str
    type: str | None = None


class RouteInput(BaseModel):
    """A documentable route as handed over by route discovery."""

    uri: str
    methods: list[str]
    handler: str  # Controller@method
    controller_group: str | None = None
    short_description: str = ""
    long_description: str = ""
    tags: list[AnnotationTag] = []
    arguments: list[HandlerArgument] = []
    input_fields: list[HandlerArgument] | None = None  # fields of a bound request type
    headers: dict[str, str] = {}  # from the applied route rules


class ParameterDescriptor(BaseModel):
    """A path, query or body parameter."""

    name: str
    type: str = CanonicalType.STRING.value
    location: str = "body"  # path / query / body
    required: bool = False
    description: str = ""
    value: Any = None
    properties: dict | None = None


class ResponseDescriptor(BaseModel):
    """A declared response for one status code."""

    status: int = 200
    description: str = "success"
    content: dict | None = None  # property schema, as parsed from the tag
    example: Any = None
    schema_ref: dict | None = None  # literal schema, used for @return references


class RouteDescriptor(BaseModel):
    """Normalized documentation for one endpoint."""

    id: str
    group: str
    title: str
    description: str
    methods: list[str]
    uri: str
    parameters: dict[str, ParameterDescriptor]
    body_parameters: dict[str, ParameterDescriptor]
    authenticated: bool
    responses: dict[int, ResponseDescriptor]
    headers: dict[str, str] = {}
