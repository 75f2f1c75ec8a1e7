"""Read-side projections over a document tree."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from oxytree.tree.walker import count_elements, flatten_elements, max_depth, node_children


def _top_level(tree: Any) -> List[Any]:
    if isinstance(tree, dict):
        root = tree.get("root")
        if isinstance(root, dict):
            return node_children(root)
        return []
    if isinstance(tree, list):
        return tree
    return []


def flatten_document_tree(tree: Any) -> List[Dict[str, Any]]:
    return flatten_elements(_top_level(tree))


def count_document_elements(tree: Any) -> int:
    return count_elements(_top_level(tree))


def get_document_element_types(tree: Any) -> List[str]:
    types: List[str] = []
    for element in flatten_document_tree(tree):
        if element["type"] not in types:
            types.append(element["type"])
    return types


def tree_stats(tree: Any) -> Dict[str, Any]:
    children = _top_level(tree)
    return {
        "element_count": count_elements(children),
        "max_depth": max_depth(children),
        "element_types": get_document_element_types(tree),
    }


def filter_elements(tree: Any, element_type: str) -> List[Dict[str, Any]]:
    needle = element_type.lower()
    return [element for element in flatten_document_tree(tree) if needle in element["type"].lower()]


def search_elements(tree: Any, query: str, property_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Elements whose type, or properties, contain ``query`` (case-insensitive)."""
    needle = query.lower()
    matches: List[Dict[str, Any]] = []
    for element in flatten_document_tree(tree):
        if not needle or needle in element["type"].lower():
            matches.append(element)
            continue
        properties = element["properties"]
        if not isinstance(properties, dict):
            continue
        if property_name:
            value = properties.get(property_name)
            if isinstance(value, str) and needle in value.lower():
                matches.append(element)
        elif needle in json.dumps(properties, ensure_ascii=False, default=str).lower():
            matches.append(element)
    return matches
