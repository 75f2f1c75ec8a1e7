"""CSS class extraction and mutation for single elements.

Classes may live under several property paths depending on which editor
version wrote the element. Reads merge all of them; writes only touch
``properties.attributes.className``, so legacy paths keep their values until
an element is fully migrated.
"""
from __future__ import annotations

import copy
import re
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from oxytree.errors import ClassRemovalError
from oxytree.utils.paths import get_nested, has_nested, set_nested
from oxytree.validation.vocabulary import ELEMENT_TYPES, OXYGEN_NAMESPACE, short_name

CANONICAL_CLASS_PATH: Tuple[str, ...] = ("properties", "attributes", "className")

CLASS_PATHS: Tuple[Tuple[str, ...], ...] = (
    CANONICAL_CLASS_PATH,
    ("properties", "settings", "advanced", "classes"),
    ("properties", "advanced", "classes"),
    ("properties", "classes"),
    ("properties", "meta", "classes"),
)

BUILTIN_PREFIXES: Tuple[str, ...] = ("bde-", "breakdance-", "ee-", "oxy-")


def _kebab(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()


def _builtin_table() -> Dict[str, Tuple[str, ...]]:
    table: Dict[str, Tuple[str, ...]] = {}
    for element_type in ELEMENT_TYPES:
        prefix = "oxy-" if element_type.startswith(OXYGEN_NAMESPACE) else "bde-"
        table[element_type] = (prefix + _kebab(short_name(element_type)),)
    return table


BUILTIN_TYPE_CLASSES: Dict[str, Tuple[str, ...]] = _builtin_table()


def is_builtin_class(name: str) -> bool:
    return name.startswith(BUILTIN_PREFIXES)


def split_classes(value: Any) -> List[str]:
    """Accept a space-delimited string or a list of names."""
    if isinstance(value, str):
        return [part for part in value.split() if part]
    if isinstance(value, (list, tuple)):
        names: List[str] = []
        for item in value:
            if isinstance(item, str):
                names.extend(part for part in item.split() if part)
        return names
    return []


def _dedupe(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def _data(node: Mapping[str, Any]) -> Mapping[str, Any]:
    data = node.get("data")
    return data if isinstance(data, Mapping) else {}


def type_classes(node: Mapping[str, Any]) -> List[str]:
    element_type = _data(node).get("type")
    if not isinstance(element_type, str):
        return []
    return list(BUILTIN_TYPE_CLASSES.get(element_type, ()))


def class_locations(node: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Classes found at each candidate path, keyed by dotted path."""
    data = _data(node)
    locations: Dict[str, List[str]] = {}
    for path in CLASS_PATHS:
        if has_nested(data, path):
            names = split_classes(get_nested(data, path))
            if names:
                locations[".".join(path)] = names
    return locations


def extract_classes(node: Mapping[str, Any]) -> List[str]:
    names = type_classes(node)
    for found in class_locations(node).values():
        names.extend(found)
    return _dedupe(names)


def custom_classes(node: Mapping[str, Any]) -> List[str]:
    return [name for name in extract_classes(node) if not is_builtin_class(name)]


def builtin_classes(node: Mapping[str, Any]) -> List[str]:
    return [name for name in extract_classes(node) if is_builtin_class(name)]


def set_classes(node: Mapping[str, Any], classes: Sequence[str] | str) -> Dict[str, Any]:
    """Copy of ``node`` with its class list written to the canonical path.

    Classes already implied by the element type are not written.
    """
    implied = set(type_classes(node))
    names = [name for name in _dedupe(split_classes(classes)) if name not in implied]
    updated = copy.deepcopy(dict(node))
    data = updated.get("data")
    if not isinstance(data, dict):
        data = {}
        updated["data"] = data
    if not isinstance(data.get("properties"), dict):
        data["properties"] = {}
    set_nested(data, CANONICAL_CLASS_PATH, " ".join(names))
    return updated


def add_classes(node: Mapping[str, Any], classes: Sequence[str] | str) -> Dict[str, Any]:
    return set_classes(node, custom_classes(node) + split_classes(classes))


def remove_class(node: Mapping[str, Any], name: str) -> Dict[str, Any]:
    """Copy of ``node`` without the custom class ``name``.

    The class is also dropped from any legacy path holding it, otherwise it
    would reappear on the next read.
    """
    if is_builtin_class(name):
        raise ClassRemovalError(f"Class '{name}' is a built-in class and cannot be removed", name)
    remaining = custom_classes(node)
    if name not in remaining:
        raise ClassRemovalError(f"Class '{name}' is not set on this element", name)

    updated = set_classes(node, [item for item in remaining if item != name])
    data = updated["data"]
    for path in CLASS_PATHS[1:]:
        if not has_nested(data, path):
            continue
        value = get_nested(data, path)
        names = split_classes(value)
        if name in names:
            kept = [item for item in names if item != name]
            set_nested(data, path, " ".join(kept) if isinstance(value, str) else kept)
    return updated
