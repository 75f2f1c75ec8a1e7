"""Stored-payload decoding.

Documents reach us in several historical shapes. Each strategy takes the raw
stored value and returns a tree dict or ``None``; ``decode_stored_tree`` tries
them in order and canonicalizes the first hit.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from oxytree.tree.canonical import NEXT_NODE_ID_KEY, assign_parent_ids, create_empty_tree, ensure_tree_integrity

logger = logging.getLogger(__name__)

TREE_JSON_KEY = "tree_json_string"

TryParse = Callable[[Any], Optional[Dict[str, Any]]]


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def parse_wrapped_json_string(raw: Any) -> Optional[Dict[str, Any]]:
    """``{"tree_json_string": "<json>"}``, the current builder storage format."""
    if not isinstance(raw, dict) or not isinstance(raw.get(TREE_JSON_KEY), str):
        return None
    decoded = _loads(raw[TREE_JSON_KEY])
    return decoded if isinstance(decoded, dict) else None


def parse_json_text(raw: Any) -> Optional[Dict[str, Any]]:
    """JSON text holding any of the other shapes."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Stored payload is not valid UTF-8", extra={"size": len(raw)})
            return None
    if not isinstance(raw, str):
        return None
    decoded = _loads(raw)
    if decoded is None or isinstance(decoded, str):
        return None
    for strategy in (parse_wrapped_json_string, parse_modern_tree, parse_classic_elements):
        tree = strategy(decoded)
        if tree is not None:
            return tree
    return None


def parse_modern_tree(raw: Any) -> Optional[Dict[str, Any]]:
    if isinstance(raw, dict) and isinstance(raw.get("root"), dict):
        return raw
    return None


def parse_classic_elements(raw: Any) -> Optional[Dict[str, Any]]:
    """Classic list of elements, re-homed under a fresh root."""
    if not isinstance(raw, list) or not raw or not any(isinstance(item, dict) for item in raw):
        return None
    tree = create_empty_tree()
    del tree[NEXT_NODE_ID_KEY]
    tree["root"]["children"] = [item for item in raw if isinstance(item, dict)]
    return assign_parent_ids(tree)


STRATEGIES: List[TryParse] = [
    parse_wrapped_json_string,
    parse_json_text,
    parse_modern_tree,
    parse_classic_elements,
]


def decode_stored_tree(raw: Any, strategies: Optional[List[TryParse]] = None) -> Optional[Dict[str, Any]]:
    for strategy in strategies or STRATEGIES:
        tree = strategy(raw)
        if tree is not None:
            logger.debug("Decoded stored tree", extra={"strategy": strategy.__name__})
            return ensure_tree_integrity(tree)
    return None


def encode_stored_tree(tree: Dict[str, Any]) -> Dict[str, str]:
    return {TREE_JSON_KEY: json.dumps(tree, ensure_ascii=False)}
