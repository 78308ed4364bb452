"""Normalization of loosely written type tokens."""

from typing import Any

from .base import CanonicalType

TYPE_SYNONYMS = {
    "int": CanonicalType.INTEGER,
    "bool": CanonicalType.BOOLEAN,
    "double": CanonicalType.FLOAT,
    "ref": CanonicalType.SCHEMA,
}


def normalize_type(token: Any) -> str:
    """Map a type token to its canonical name.

    Empty tokens default to ``string``. Unknown tokens pass through
    unchanged so they can still name a referenced schema. Non-string
    tokens, as YAML may produce, are read as their text.
    """
    token = "" if token is None else str(token).strip()
    if not token:
        return CanonicalType.STRING.value
    if token in TYPE_SYNONYMS:
        return TYPE_SYNONYMS[token].value
    return token
