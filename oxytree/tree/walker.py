"""Recursive traversal primitives shared by every tree component.

Children sequences coming from outside are often partially malformed, so all
walkers skip entries that are not mappings instead of failing.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


def same_id(left: Any, right: Any) -> bool:
    """Ids are equal when their string forms are equal (1 == "1")."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


def node_children(node: Mapping[str, Any]) -> List[Any]:
    children = node.get("children")
    return children if isinstance(children, list) else []


def node_type(node: Mapping[str, Any], default: str = "unknown") -> str:
    data = node.get("data")
    if isinstance(data, Mapping) and isinstance(data.get("type"), str):
        return data["type"]
    return default


def iter_nodes(children: Sequence[Any], depth: int = 0) -> Iterator[Tuple[Dict[str, Any], int]]:
    """Yield ``(node, depth)`` in pre-order, without recursion."""
    stack = [(child, depth) for child in reversed(children)]
    while stack:
        node, level = stack.pop()
        if not isinstance(node, dict):
            continue
        yield node, level
        stack.extend((child, level + 1) for child in reversed(node_children(node)))


def flatten_elements(children: Sequence[Any], path: str = "", depth: int = 0) -> List[Dict[str, Any]]:
    elements: List[Dict[str, Any]] = []
    stack = [(child, index, path, depth) for index, child in reversed(list(enumerate(children)))]
    while stack:
        child, index, parent_path, level = stack.pop()
        if not isinstance(child, dict):
            continue
        current_path = f"{parent_path}.{index}" if parent_path else str(index)
        data = child.get("data") if isinstance(child.get("data"), Mapping) else {}
        properties = data.get("properties")
        nested = node_children(child)
        elements.append(
            {
                "id": child.get("id"),
                "type": node_type(child),
                "path": current_path,
                "depth": level,
                "properties": properties if properties is not None else {},
                "hasChildren": bool(nested),
            }
        )
        stack.extend(
            (grandchild, position, current_path, level + 1)
            for position, grandchild in reversed(list(enumerate(nested)))
        )
    return elements


def count_elements(children: Sequence[Any]) -> int:
    return sum(1 for _ in iter_nodes(children))


def max_depth(children: Sequence[Any], start: int = 1) -> int:
    """Deepest level reached; an empty sequence is depth 0."""
    deepest = 0
    for _, depth in iter_nodes(children):
        deepest = max(deepest, depth + start)
    return deepest


def find_element(children: Sequence[Any], target_id: Any) -> Optional[Dict[str, Any]]:
    """First node in pre-order whose id matches ``target_id``."""
    for node, _ in iter_nodes(children):
        if same_id(node.get("id"), target_id):
            return node
    return None


def find_in_tree(tree: Any, target_id: Any) -> Optional[Dict[str, Any]]:
    """The root itself or the first element of ``tree`` whose id matches."""
    root = tree.get("root") if isinstance(tree, Mapping) else None
    if not isinstance(root, dict):
        return None
    if same_id(root.get("id"), target_id):
        return root
    return find_element(node_children(root), target_id)


def find_parent(children: Sequence[Any], target_id: Any, parent: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    for child in children:
        if not isinstance(child, dict):
            continue
        if same_id(child.get("id"), target_id):
            return parent
        found = find_parent(node_children(child), target_id, child)
        if found is not None:
            return found
    return None


def replace_element(children: Sequence[Any], target_id: Any, replacement: Dict[str, Any]) -> Tuple[List[Any], bool]:
    """Return a copy of ``children`` with the first matching node replaced.

    Only the containers on the path to the match are copied; the input is
    never modified. Duplicate ids: first match in pre-order wins.
    """
    result: List[Any] = []
    replaced = False
    for child in children:
        if replaced or not isinstance(child, dict):
            result.append(child)
            continue
        if same_id(child.get("id"), target_id):
            result.append(replacement)
            replaced = True
            continue
        if node_children(child):
            new_children, replaced = replace_element(child["children"], target_id, replacement)
            if replaced:
                child = dict(child)
                child["children"] = new_children
        result.append(child)
    return result, replaced


def collect_ids(tree: Any) -> List[Any]:
    """Every node id in a tree, a rootless element, or a classic element list."""
    ids: List[Any] = []
    if isinstance(tree, list):
        return [node["id"] for node, _ in iter_nodes(tree) if node.get("id") is not None]
    if not isinstance(tree, Mapping):
        return ids
    root = tree.get("root")
    if isinstance(root, Mapping):
        if root.get("id") is not None:
            ids.append(root["id"])
        ids.extend(node["id"] for node, _ in iter_nodes(node_children(root)) if node.get("id") is not None)
    ids.extend(node["id"] for node, _ in iter_nodes(node_children(tree)) if node.get("id") is not None)
    return ids
