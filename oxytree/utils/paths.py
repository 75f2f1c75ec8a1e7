"""Nested-key lookup helpers for loosely typed property maps."""
from __future__ import annotations

from typing import Any, List, Mapping, MutableMapping, Sequence

_MISSING = object()


def parse_path(path: str | Sequence[str]) -> List[str]:
    if isinstance(path, str):
        return [part for part in path.split(".") if part]
    return list(path)


def get_nested(obj: Any, path: str | Sequence[str], default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` if any step is missing."""
    current = obj
    for key in parse_path(path):
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def has_nested(obj: Any, path: str | Sequence[str]) -> bool:
    return get_nested(obj, path, _MISSING) is not _MISSING


def set_nested(obj: MutableMapping[str, Any], path: str | Sequence[str], value: Any) -> MutableMapping[str, Any]:
    """Set ``value`` at ``path``, creating (or replacing non-dict) intermediates."""
    keys = parse_path(path)
    if not keys:
        raise ValueError("path must contain at least one key")
    current = obj
    for key in keys[:-1]:
        nxt = current.get(key)
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            current[key] = nxt
        current = nxt
    current[keys[-1]] = value
    return obj
