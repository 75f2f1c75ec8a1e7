"""JSON Schema for the canonical tree shape accepted by the page builder."""
from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

NODE_ID_SCHEMA: Dict[str, Any] = {"type": ["integer", "string"]}

CANONICAL_TREE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["root", "status", "nextNodeId", "exportedLookupTable"],
    "properties": {
        "root": {
            "type": "object",
            "required": ["id", "data", "children"],
            "properties": {
                "id": NODE_ID_SCHEMA,
                "data": {
                    "type": "object",
                    "required": ["type", "properties"],
                    "properties": {
                        "type": {"const": "root"},
                        "properties": {"type": "null"},
                    },
                },
                "children": {"type": "array", "items": {"$ref": "#/$defs/node"}},
            },
        },
        "status": {"const": "exported"},
        "nextNodeId": {"type": "integer", "minimum": 1},
        "exportedLookupTable": {"type": "object"},
    },
    "$defs": {
        "node": {
            "type": "object",
            "required": ["id", "data", "children", "parentId"],
            "properties": {
                "id": NODE_ID_SCHEMA,
                "parentId": NODE_ID_SCHEMA,
                "data": {
                    "type": "object",
                    "required": ["type", "properties"],
                    "properties": {
                        "type": {"type": "string", "minLength": 1},
                        "properties": {"type": ["object", "null"]},
                    },
                },
                "children": {"type": "array", "items": {"$ref": "#/$defs/node"}},
            },
            "additionalProperties": True,
        }
    },
    "additionalProperties": True,
}

_VALIDATOR = Draft202012Validator(CANONICAL_TREE_SCHEMA)


def check_canonical(tree: Any) -> List[str]:
    """Schema error messages for ``tree``; empty when the builder would accept it."""
    errors = sorted(_VALIDATOR.iter_errors(tree), key=lambda err: [str(part) for part in err.absolute_path])
    messages: List[str] = []
    for err in errors:
        location = ".".join(str(part) for part in err.absolute_path) or "tree"
        messages.append(f"{location}: {err.message}")
    return messages


def is_canonical(tree: Any) -> bool:
    return _VALIDATOR.is_valid(tree)
