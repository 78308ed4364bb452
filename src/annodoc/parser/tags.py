"""Grammar for annotation tag text.

Three tag shapes are recognised:

    parameter tags   <name> <type> [required] [description]
    response tags    [status] [json literal] [description]
                     [properties:]
                       <key map>
    return tags      <type>   (array<T>, Collection<T>, list[T] or T[] for lists)

A parameter description may embed an ``Example:`` value and a
``properties:`` block. The block is a YAML key map whose lines may also
use the parameter shorthand ``name type [required] [description]``.
"""

import json
import re
import textwrap
from typing import Any

import yaml
from pydantic import BaseModel

from annodoc.errors import MalformedTagError
from .base import CanonicalType, ResponseDescriptor
from .types import normalize_type

REQUIRED_MARKER = "required"

_PROPERTIES_RE = re.compile(r"(?:^|[ \t])properties:[ \t]*\n(?=(?:[ \t]*\n)*[ \t]+[^\s-])", re.MULTILINE)
_INLINE_EXAMPLE_RE = re.compile(r"(?:^|\s)Example:[ \t]*([^\n]*)")
_BLOCK_EXAMPLE_RES = {
    CanonicalType.OBJECT.value: re.compile(r"\n\s*Example:\s*(\{.*\})\s*$", re.DOTALL),
    CanonicalType.ARRAY.value: re.compile(r"\n\s*Example:\s*(\[.*\])\s*$", re.DOTALL),
}
_STATUS_RE = re.compile(r"^\s*(\d{3})(?!\S)")
_RETURN_TYPE_RE = re.compile(r"^(?:(array|Collection|list|List)[<\[])?([\w\\.]+?)[>\]]?(\[\])?$")

_PASSTHROUGH_TYPES = {"json", CanonicalType.OBJECT.value, CanonicalType.ARRAY.value}


class ParameterTag(BaseModel):
    """A parsed @bodyParam / @queryParam tag."""

    name: str
    type: str
    required: bool = False
    description: str = ""
    example: Any = None
    properties: dict | None = None


# -- parameter tags -----------------------------------------------------------

def _take_token(text: str) -> tuple[str, str]:
    """Split off the first whitespace-delimited token."""
    parts = text.lstrip().split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def split_parameter_tag(tag: str, text: str) -> tuple[str, str, bool, str]:
    """Split parameter tag text into (name, type, required, description)."""
    if len(text.split()) < 2:
        raise MalformedTagError(tag, f"expected '<name> <type> [required] [description]', got {text!r}")

    name, rest = _take_token(text)
    type_token, rest = _take_token(rest)
    marker, remainder = _take_token(rest)
    if marker == REQUIRED_MARKER:
        return name, type_token, True, remainder.strip()
    return name, type_token, False, rest.strip()


def parse_parameter_tag(tag: str, text: str) -> ParameterTag:
    """Parse the full text of a parameter-shaped tag."""
    name, type_token, required, description = split_parameter_tag(tag, text)
    type_ = normalize_type(type_token)
    description, example, properties = parse_description(tag, description, type_)
    return ParameterTag(
        name=name,
        type=type_,
        required=required,
        description=description,
        example=example,
        properties=properties,
    )


def parse_description(tag: str, text: str, type_: str) -> tuple[str, Any, dict | None]:
    """Separate prose, example and property block. Returns (description, example, properties)."""
    example = None
    block_example = _BLOCK_EXAMPLE_RES.get(type_)

    if block_example is not None:
        match = block_example.search(text)
        if match:
            example = cast_example(tag, match.group(1), type_)
            text = text[:match.start()]

    prose, properties = split_property_block(tag, text)

    if block_example is None:
        prose, raw = _extract_inline_example(prose)
        if raw is not None:
            example = cast_example(tag, raw, type_)

    return prose.strip(), example, properties


def _extract_inline_example(text: str) -> tuple[str, str | None]:
    match = _INLINE_EXAMPLE_RE.search(text)
    if not match:
        return text, None
    raw = match.group(1).strip()
    remaining = (text[:match.start()] + text[match.end():]).strip()
    return remaining, raw or None


def cast_example(tag: str, value: str, type_: str) -> Any:
    """Cast a textual example to the declared type."""
    value = value.strip()

    # A plain truthiness cast would turn the string "false" into True.
    if type_ == CanonicalType.BOOLEAN.value:
        return value not in ("false", "0", "")

    if type_ in _PASSTHROUGH_TYPES:
        return value

    try:
        if type_ == CanonicalType.INTEGER.value:
            return int(value)
        if type_ in (CanonicalType.NUMBER.value, CanonicalType.FLOAT.value):
            return float(value)
    except ValueError:
        raise MalformedTagError(tag, f"example {value!r} is not a valid {type_}")

    return value


# -- property blocks ----------------------------------------------------------

def split_property_block(tag: str, text: str) -> tuple[str, dict | None]:
    """Cut a trailing `properties:` block off a description."""
    match = _PROPERTIES_RE.search(text)
    if not match:
        return text, None
    return text[:match.start()], parse_property_block(tag, text[match.end():])


def parse_property_block(tag: str, block: str) -> dict:
    """Parse an indented key map into a nested schema."""
    lines = [_expand_shorthand(tag, line) for line in textwrap.dedent(block).splitlines()]
    try:
        data = yaml.safe_load("\n".join(lines))
    except yaml.YAMLError as e:
        raise MalformedTagError(tag, f"invalid properties block: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedTagError(tag, "properties block must be a key map")
    return _normalize_schema_types(tag, data)


def _expand_shorthand(tag: str, line: str) -> str:
    """Rewrite `name type [required] [description]` lines as YAML flow mappings."""
    stripped = line.strip()
    if not stripped or stripped[0] in "-{[#'\"":
        return line
    first, _ = _take_token(stripped)
    if ":" in first or len(stripped.split()) < 2:
        return line

    parsed = parse_parameter_tag(tag, stripped)
    leaf: dict[str, Any] = {"type": parsed.type, "description": parsed.description}
    if parsed.required:
        leaf["required"] = True
    if parsed.example is not None:
        leaf["example"] = parsed.example

    indent = line[:len(line) - len(line.lstrip())]
    return f"{indent}{json.dumps(parsed.name)}: {json.dumps(leaf)}"


def _starts_key_map(block: str) -> bool:
    """Whether the first non-blank line of `block` reads as a key, not a list item."""
    first = next((line.strip() for line in block.splitlines() if line.strip()), "")
    return bool(first) and not first.startswith("-")


def _normalize_schema_types(tag: str, node: Any) -> Any:
    if isinstance(node, dict):
        result = {}
        for key, value in node.items():
            if key == "type" and isinstance(value, str):
                result[key] = normalize_type(value)
            elif key == "type" and not isinstance(value, (dict, list)):
                raise MalformedTagError(tag, f"type must be a type name, got {value!r}")
            else:
                result[key] = _normalize_schema_types(tag, value)
        return result
    if isinstance(node, list):
        return [_normalize_schema_types(tag, item) for item in node]
    return node


# -- response tags ------------------------------------------------------------

def parse_response_tag(tag: str, text: str) -> ResponseDescriptor:
    """Parse an @response tag into a ResponseDescriptor.

    The status defaults to 200. A JSON literal right after the status is
    taken as the example body. Lines after the first form the property
    key map, with or without a `properties:` header.
    """
    status = 200
    rest = text
    match = _STATUS_RE.match(text)
    if match:
        status = int(match.group(1))
        rest = text[match.end():]
    rest = rest.lstrip()

    example = None
    if rest.startswith(("{", "[")):
        try:
            example, end = json.JSONDecoder().raw_decode(rest)
        except json.JSONDecodeError as e:
            raise MalformedTagError(tag, f"invalid JSON example: {e.msg}")
        rest = rest[end:]

    prose, properties = split_property_block(tag, rest)
    if properties is None:
        first_line, _, body = prose.partition("\n")
        if _starts_key_map(body):
            prose, properties = first_line, parse_property_block(tag, body)

    return ResponseDescriptor(
        status=status,
        description=prose.strip() or "success",
        content=properties,
        example=example,
    )


def parse_return_tag(tag: str, text: str) -> ResponseDescriptor:
    """Turn a declared return type into a 200 response referencing a component schema."""
    type_token, _ = _take_token(text)
    match = _RETURN_TYPE_RE.match(type_token.strip("\\/"))
    if not type_token or not match:
        raise MalformedTagError(tag, f"unrecognised return type {type_token!r}")

    name = re.split(r"[\\.]", match.group(2))[-1]
    ref = {"$ref": f"#/components/schemas/{name}"}

    if match.group(1) or match.group(3):
        return ResponseDescriptor(
            status=200,
            description=f"Array of {name}s",
            schema_ref={"type": "array", "items": ref},
        )
    return ResponseDescriptor(status=200, description=name, schema_ref=ref)
