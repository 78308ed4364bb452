"""Dotted-path helpers for building and flattening nested example trees.

A path segment that is a non-negative integer addresses a list element,
so ``items.0.id`` describes the first element of the ``items`` array.
A new list is only started by segment ``0``; any other number is a
plain mapping key.
"""

from typing import Any

MAX_INDEX = 999


def _is_index(key: str) -> bool:
    return key.isdigit() and int(key) <= MAX_INDEX


def _get(node: dict | list, key: str) -> Any:
    if isinstance(node, list):
        index = int(key)
        return node[index] if index < len(node) else None
    return node.get(key)


def _put(node: dict | list, key: str, value: Any) -> None:
    if isinstance(node, dict):
        node[key] = value
        return
    index = int(key)
    if index < len(node):
        node[index] = value
    else:
        node.append(value)


def _fits(node: Any, key: str) -> bool:
    """Whether `key` can be written into `node` without a gap or type change."""
    if isinstance(node, dict):
        return True
    return _is_index(key) and int(key) <= len(node)


def _as_dict(node: list) -> dict:
    return {str(i): item for i, item in enumerate(node)}


def set_at_path(tree: dict | list, path: str, value: Any, separator: str = ".") -> dict | list:
    """Assign `value` at a dotted path, creating intermediate containers.

    Scalars sitting on the path are overwritten. Sibling keys under a
    shared prefix are kept. A list root that cannot take the first key is
    replaced by a mapping, so callers must keep the returned tree.
    """
    keys = path.strip(separator).split(separator)
    if not _fits(tree, keys[0]):
        tree = _as_dict(tree)

    node = tree
    for key, next_key in zip(keys, keys[1:]):
        child = _get(node, key)
        if not isinstance(child, (dict, list)):
            child = [] if next_key == "0" else {}
        elif not _fits(child, next_key):
            child = _as_dict(child)
        _put(node, key, child)
        node = child

    _put(node, keys[-1], value)
    return tree


def flatten(tree: dict | list, separator: str = ".") -> dict[str, Any]:
    """Flatten a nested tree into {joined.path: leaf}.

    Empty containers count as leaves.
    """
    result: dict[str, Any] = {}
    if tree:
        _flatten_into(tree, "", separator, result)
    return result


def _flatten_into(node: Any, prefix: str, separator: str, result: dict[str, Any]) -> None:
    if isinstance(node, dict) and node:
        items = node.items()
    elif isinstance(node, list) and node:
        items = enumerate(node)
    else:
        result[prefix] = node
        return

    for key, value in items:
        path = f"{prefix}{separator}{key}" if prefix else str(key)
        _flatten_into(value, path, separator, result)


def build_from_flat(flat: dict[str, Any], separator: str = ".") -> dict | list:
    """Rebuild a nested tree from a flattened path map."""
    first = next(iter(flat), "")
    tree: dict | list = [] if first.strip(separator).split(separator)[0] == "0" else {}
    for path, value in flat.items():
        tree = set_at_path(tree, path, value, separator)
    return tree
