"""Example value synthesis for documented parameters and responses."""

import random
import string
from datetime import datetime, timezone
from typing import Any, Callable

from annodoc.generator.pathtree import build_from_flat
from annodoc.parser.base import CanonicalType

STRING_LENGTH = 12
ALPHANUMERIC = string.ascii_letters + string.digits


class ExampleSynthesizer:
    """Fabricates illustrative values from canonical types.

    Values are random; pass a seeded ``random.Random`` for reproducible
    output.
    """

    def __init__(self, rng: random.Random | None = None, clock: Callable[[], datetime] | None = None):
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def synthesize(self, type_: str, schema: Any = None) -> Any:
        """Return an example value for a single type."""
        try:
            canonical = CanonicalType(type_)
        except ValueError:
            canonical = CanonicalType.STRING

        if canonical is CanonicalType.INTEGER:
            return self.rng.randint(1, 20)
        if canonical in (CanonicalType.NUMBER, CanonicalType.FLOAT):
            return round(self.rng.uniform(0, 1000), 2)
        if canonical is CanonicalType.BOOLEAN:
            return self.rng.random() < 0.5
        if canonical is CanonicalType.STRING:
            return "".join(self.rng.choice(ALPHANUMERIC) for _ in range(STRING_LENGTH))
        if canonical is CanonicalType.DATE:
            return self._date_this_month()
        if canonical is CanonicalType.ARRAY:
            return schema if schema is not None else []
        if canonical is CanonicalType.OBJECT:
            return schema if schema is not None else {}
        return _first(schema)

    def _date_this_month(self) -> str:
        now = self.clock()
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        offset = self.rng.randint(0, int((now - start).total_seconds()))
        return datetime.fromtimestamp(start.timestamp() + offset, tz=now.tzinfo).isoformat()

    def value_for(self, type_: str, properties: dict | None = None) -> Any:
        """Example for a parameter, expanding its nested properties when present."""
        if properties:
            if "$ref" in properties:
                return self.synthesize(type_, {"$ref": properties["$ref"]})
            if type_ == CanonicalType.OBJECT.value:
                return self.composite(properties)
            if type_ == CanonicalType.ARRAY.value:
                example = self.composite(properties)
                return example if isinstance(example, list) else [example]
        return self.synthesize(type_)

    def composite(self, schema: dict) -> dict | list:
        """Build a nested example from a nested property schema."""
        flat: dict[str, Any] = {}
        self._collect(schema, "", flat)
        return build_from_flat(flat)

    def _collect(self, node: Any, path: str, flat: dict[str, Any]) -> None:
        if not isinstance(node, dict):
            return

        items = node.get("items")
        if isinstance(items, dict) and isinstance(items.get("properties"), dict):
            # index 0 stands for the first sample element of the array
            for key, child in items["properties"].items():
                self._collect(child, f"{path}.0.{key}", flat)
        elif isinstance(node.get("properties"), dict):
            if path and not node["properties"]:
                flat[path] = {}
            self._collect(node["properties"], path, flat)
        elif isinstance(node.get("type"), str):
            flat[path] = node["example"] if "example" in node else self.synthesize(node["type"])
        else:
            for key, child in node.items():
                self._collect(child, f"{path}.{key}", flat)


def _first(schema: Any) -> Any:
    if isinstance(schema, dict):
        return next(iter(schema.values()), None)
    if isinstance(schema, (list, tuple)):
        return schema[0] if schema else None
    return None
