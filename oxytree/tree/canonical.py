"""Tree canonicalization.

Fills in everything the strict builder schema requires without discarding
authored structure:

- root.data.type is the literal "root" (no namespace)
- root.data.properties is null, not an empty object or list
- nextNodeId is greater than every element id
- exportedLookupTable is an object ({} once encoded, never [])
- status is "exported"

Canonicalization never rejects input; that is the validator's job.
"""
from __future__ import annotations

import copy
import logging
import math
import re
import secrets
from typing import Any, Dict, Mapping, Optional

from oxytree.tree.walker import collect_ids, node_children

logger = logging.getLogger(__name__)

NEXT_NODE_ID_KEY = "nextNodeId"
LEGACY_NEXT_NODE_ID_KEY = "_nextNodeId"
PARENT_ID_KEY = "parentId"
LEGACY_PARENT_ID_KEY = "_parentId"
LOOKUP_TABLE_KEY = "exportedLookupTable"
EXPORTED_STATUS = "exported"
ROOT_TYPE = "root"
EMPTY_ROOT_ID = "el-root"

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")
_DECIMAL_RE = re.compile(r"^\s*[+-]?\d+\.\d+\s*$")
_TRAILING_DIGITS_RE = re.compile(r"(\d+)$")


def is_namespaced_root_type(value: Any) -> bool:
    if not isinstance(value, str) or "\\" not in value:
        return False
    parts = [part for part in value.split("\\") if part]
    return len(parts) >= 2 and parts[-1] == "Root"


def _id_number(value: Any) -> Optional[int]:
    """Numeric weight of an id, or ``None`` when it has none we can use."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else None
        if isinstance(value, str):
            if _INTEGER_RE.match(value):
                return int(value)
            if _DECIMAL_RE.match(value):
                # truncate toward zero without a float round-trip
                return int(value.strip().split(".", 1)[0])
            match = _TRAILING_DIGITS_RE.search(value)
            if match:
                return int(match.group(1))
    except (ValueError, OverflowError):
        # digit runs past the interpreter's int-string limit
        return None
    return None


def calculate_next_node_id(tree: Any) -> int:
    """One more than the largest numeric id (or trailing digit group), at least 1."""
    max_id = 0
    for value in collect_ids(tree):
        number = _id_number(value)
        if number is not None:
            max_id = max(max_id, number)
    return max(1, max_id + 1)


def has_next_node_id(tree: Mapping[str, Any]) -> bool:
    return tree.get(NEXT_NODE_ID_KEY) is not None or tree.get(LEGACY_NEXT_NODE_ID_KEY) is not None


def ensure_tree_integrity(tree: Any) -> Any:
    """Return a canonical copy of ``tree``; non-trees are returned unchanged.

    Only the top level, the root node and ``root.data`` are copied, since
    nothing below them is rewritten. Element subtrees are shared with the
    input.
    """
    if not isinstance(tree, dict) or "root" not in tree:
        return tree

    tree = dict(tree)
    root = tree["root"]
    if isinstance(root, dict):
        root = dict(root)
        tree["root"] = root

    if isinstance(root, dict) and isinstance(root.get("data"), dict):
        data = dict(root["data"])
        root["data"] = data
        if is_namespaced_root_type(data.get("type")):
            logger.debug("Rewriting namespaced root type", extra={"root_type": data.get("type")})
            data["type"] = ROOT_TYPE
        if not data.get("properties"):
            data["properties"] = None

    if not has_next_node_id(tree):
        tree[NEXT_NODE_ID_KEY] = calculate_next_node_id(tree)

    if not isinstance(tree.get(LOOKUP_TABLE_KEY), dict):
        tree[LOOKUP_TABLE_KEY] = {}

    if tree.get("status") is None:
        tree["status"] = EXPORTED_STATUS

    return tree


def create_empty_tree() -> Dict[str, Any]:
    return {
        "root": {
            "id": EMPTY_ROOT_ID,
            "data": {"type": ROOT_TYPE, "properties": None},
            "children": [],
        },
        NEXT_NODE_ID_KEY: 1,
    }


def generate_element_id() -> str:
    return f"el-{secrets.token_hex(4)}"


def regenerate_element_ids(tree: Any) -> Any:
    """Copy of ``tree`` with every string id replaced by a fresh one.

    Integer ids belong to the builder and are kept so parent links stay valid.
    """
    if isinstance(tree, list):
        return [regenerate_element_ids(item) if isinstance(item, dict) else item for item in tree]
    if not isinstance(tree, dict):
        return tree
    tree = dict(tree)
    if isinstance(tree.get("id"), str):
        tree["id"] = generate_element_id()
    if isinstance(tree.get("root"), dict):
        tree["root"] = regenerate_element_ids(tree["root"])
    if isinstance(tree.get("children"), list):
        tree["children"] = regenerate_element_ids(tree["children"])
    return tree


def assign_parent_ids(tree: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in missing parent links from the containing node; authored links are kept."""
    tree = copy.deepcopy(tree)
    root = tree.get("root")
    if not isinstance(root, dict):
        return tree

    def _assign(container: Dict[str, Any]) -> None:
        for child in node_children(container):
            if not isinstance(child, dict):
                continue
            if PARENT_ID_KEY not in child and LEGACY_PARENT_ID_KEY not in child:
                child[PARENT_ID_KEY] = container.get("id")
            _assign(child)

    _assign(root)
    return tree


def is_valid_tree_structure(tree: Any) -> bool:
    """Minimal shape required before a tree may be persisted."""
    if isinstance(tree, dict) and "root" in tree:
        root = tree["root"]
        return isinstance(root, dict) and root.get("id") is not None and isinstance(root.get("children"), list)
    if isinstance(tree, list):
        return bool(tree) and all(isinstance(item, dict) for item in tree)
    return False

