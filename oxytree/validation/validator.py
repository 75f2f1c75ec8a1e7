"""Document tree validation with path-precise, actionable diagnostics.

Every problem in the tree is collected in a single depth-first pass. Issues
are returned as data; nothing here raises for bad input.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from oxytree.models.issues import ValidationIssue, ValidationResult
from oxytree.tree.canonical import (
    EXPORTED_STATUS,
    LEGACY_NEXT_NODE_ID_KEY,
    LEGACY_PARENT_ID_KEY,
    LOOKUP_TABLE_KEY,
    NEXT_NODE_ID_KEY,
    PARENT_ID_KEY,
    ROOT_TYPE,
)
from oxytree.utils.config import settings
from oxytree.validation.vocabulary import (
    ESSENTIAL_NAMESPACE,
    OXYGEN_NAMESPACE,
    has_valid_namespace,
    is_known_type,
    match_short_name,
    suggest_types,
)

logger = logging.getLogger(__name__)

EXAMPLE_TYPE = "EssentialElements\\Heading"
EXAMPLE_ROOT: Dict[str, Any] = {"id": 1, "data": {"type": ROOT_TYPE, "properties": None}, "children": []}
EXAMPLE_ELEMENT: Dict[str, Any] = {
    "id": 100,
    "data": {"type": EXAMPLE_TYPE, "properties": None},
    "children": [],
    PARENT_ID_KEY: 1,
}
NAMESPACE_HINT = f"string with {ESSENTIAL_NAMESPACE} or {OXYGEN_NAMESPACE} prefix"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if _is_int(value):
        return "integer"
    if isinstance(value, float):
        return "double"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class TreeValidator:
    """Collects errors and warnings for one tree at a time."""

    def __init__(self, max_depth: Optional[int] = None):
        self.max_depth = max_depth if max_depth is not None else settings.max_tree_depth
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []

    def _error(self, code: str, path: str, message: str, expected: Any, example: Any, **extra: Any) -> None:
        self.errors.append(ValidationIssue(code=code, path=path, message=message, expected=expected, example=example, **extra))

    def _warning(self, code: str, path: str, message: str, **extra: Any) -> None:
        self.warnings.append(ValidationIssue(code=code, path=path, message=message, **extra))

    def validate(self, tree: Any) -> ValidationResult:
        self.errors = []
        self.warnings = []

        if not isinstance(tree, dict):
            self._error(
                "invalid_tree_type",
                "tree",
                "Tree must be an object.",
                "object",
                {"root": EXAMPLE_ROOT, "status": EXPORTED_STATUS},
            )
            return self._result()

        root = tree.get("root")
        if root is None:
            self._error("missing_root", "root", "Tree must have a root property.", "object", EXAMPLE_ROOT)
        elif not isinstance(root, dict):
            self._error("invalid_root_type", "root", "Root must be an object.", "object", EXAMPLE_ROOT)
        else:
            self._validate_root(root)

        status = tree.get("status")
        if status is None:
            self._error(
                "missing_status",
                "status",
                f'Tree must have a status property set to "{EXPORTED_STATUS}".',
                "string",
                EXPORTED_STATUS,
            )
        elif status != EXPORTED_STATUS:
            self._error(
                "invalid_status",
                "status",
                f'Status must be "{EXPORTED_STATUS}", not {status!r}.',
                f'string (literal "{EXPORTED_STATUS}")',
                EXPORTED_STATUS,
            )

        for key in (NEXT_NODE_ID_KEY, LEGACY_NEXT_NODE_ID_KEY):
            if tree.get(key) is not None:
                self._warning(
                    "unnecessary_next_node_id",
                    key,
                    f"{key} should not be included in the tree. It is computed automatically on save.",
                    action="Remove this property from your tree.",
                )
        if tree.get(LOOKUP_TABLE_KEY) is not None:
            self._warning(
                "unnecessary_exported_lookup_table",
                LOOKUP_TABLE_KEY,
                f"{LOOKUP_TABLE_KEY} should not be included in the tree. It is added automatically on save.",
                action="Remove this property from your tree.",
            )

        return self._result()

    def _result(self) -> ValidationResult:
        result = ValidationResult(errors=list(self.errors), warnings=list(self.warnings))
        logger.debug(
            "Validated document tree",
            extra={"error_count": result.error_count, "warning_count": result.warning_count},
        )
        return result

    def _validate_root(self, root: Dict[str, Any]) -> None:
        root_id = root.get("id")
        if root_id is None:
            self._error("missing_root_id", "root.id", "Root must have an id property.", "integer", 1)
        elif not _is_int(root_id):
            self._error(
                "invalid_root_id_type",
                "root.id",
                f"Root id must be an integer. Received: {_type_name(root_id)}",
                "integer",
                1,
            )

        data = root.get("data")
        if data is None:
            self._error(
                "missing_root_data", "root.data", "Root must have a data property.", "object", EXAMPLE_ROOT["data"]
            )
        elif not isinstance(data, dict):
            self._error(
                "invalid_root_data_type", "root.data", "Root data must be an object.", "object", EXAMPLE_ROOT["data"]
            )
        else:
            root_type = data.get("type")
            if root_type is None:
                self._error(
                    "missing_root_data_type",
                    "root.data.type",
                    "Root data must have a type property.",
                    "string",
                    ROOT_TYPE,
                )
            elif root_type != ROOT_TYPE:
                self._error(
                    "invalid_root_data_type_value",
                    "root.data.type",
                    f'Root data type must be lowercase "{ROOT_TYPE}", not "{root_type}".',
                    f'string (literal "{ROOT_TYPE}")',
                    ROOT_TYPE,
                )

            if "properties" not in data:
                self._error(
                    "missing_root_data_properties",
                    "root.data.properties",
                    "Root data must have a properties property.",
                    "null",
                    None,
                )
            elif data["properties"] is not None:
                self._warning(
                    "non_null_root_properties",
                    "root.data.properties",
                    f"Root data properties should be null. Found: {_type_name(data['properties'])}",
                    expected="null",
                    action="Set root.data.properties to null.",
                )

        children = root.get("children")
        if children is None:
            self._error("missing_root_children", "root.children", "Root must have a children array.", "array", [])
        elif not isinstance(children, list):
            self._error(
                "invalid_root_children_type", "root.children", "Root children must be an array.", "array", []
            )
        else:
            parent_id = root_id if _is_int(root_id) else 1
            for index, child in enumerate(children):
                self._validate_child(child, f"root.children[{index}]", parent_id, 1)

    def _validate_child(self, element: Any, path: str, parent_id: int, depth: int) -> None:
        if not isinstance(element, dict):
            self._error("invalid_element_type", path, "Element must be an object.", "object", EXAMPLE_ELEMENT)
            return

        element_id = element.get("id")
        if element_id is None:
            self._error("missing_element_id", f"{path}.id", "Element must have an id property.", "integer", 100)
        elif not _is_int(element_id):
            self._error(
                "invalid_element_id_type",
                f"{path}.id",
                f"Element id must be an integer, not {_type_name(element_id)}.",
                "integer",
                100,
            )

        self._validate_element_data(element.get("data"), path)

        children = element.get("children")
        if children is None:
            self._error(
                "missing_element_children",
                f"{path}.children",
                "Element must have a children array (use [] for leaf nodes).",
                "array",
                [],
            )
        elif not isinstance(children, list):
            self._error(
                "invalid_element_children_type", f"{path}.children", "Element children must be an array.", "array", []
            )
        elif children and depth >= self.max_depth:
            self._error(
                "max_depth_exceeded",
                f"{path}.children",
                f"Tree depth exceeds the maximum of {self.max_depth}.",
                f"depth <= {self.max_depth}",
                [],
            )
        else:
            own_id = element_id if _is_int(element_id) else 0
            for index, child in enumerate(children):
                self._validate_child(child, f"{path}.children[{index}]", own_id, depth + 1)

        self._validate_parent_id(element, path, parent_id)

    def _validate_element_data(self, data: Any, path: str) -> None:
        example = EXAMPLE_ELEMENT["data"]
        if data is None:
            self._error("missing_element_data", f"{path}.data", "Element must have a data property.", "object", example)
            return
        if not isinstance(data, dict):
            self._error("invalid_element_data_type", f"{path}.data", "Element data must be an object.", "object", example)
            return

        element_type = data.get("type")
        if element_type is None:
            self._error(
                "missing_element_type",
                f"{path}.data.type",
                "Element data must have a type property.",
                "string",
                EXAMPLE_TYPE,
            )
        elif not isinstance(element_type, str):
            self._error(
                "invalid_element_type_type",
                f"{path}.data.type",
                "Element data type must be a string.",
                "string",
                EXAMPLE_TYPE,
            )
        else:
            self._validate_element_type(element_type, f"{path}.data.type")

        if "properties" not in data:
            self._error(
                "missing_element_properties",
                f"{path}.data.properties",
                "Element data must have a properties property (null or object).",
                "object|null",
                None,
            )

    def _validate_element_type(self, element_type: str, path: str) -> None:
        if has_valid_namespace(element_type):
            if is_known_type(element_type):
                return
            suggestions = suggest_types(element_type)
            self._error(
                "unknown_element_type",
                path,
                f"Element type '{element_type}' is not a recognized element type.",
                "known element type",
                suggestions[0] if suggestions else EXAMPLE_TYPE,
                suggestions=suggestions,
                action=f"Did you mean '{suggestions[0]}'?" if suggestions else "Use a known element type.",
            )
            return

        exact = match_short_name(element_type)
        suggestions = [exact] if exact else suggest_types(element_type)
        if suggestions:
            action = f"Did you mean '{suggestions[0]}'?"
        else:
            action = f"Add {ESSENTIAL_NAMESPACE} or {OXYGEN_NAMESPACE} prefix to your element type."
        self._error(
            "invalid_element_namespace",
            path,
            f"Element type '{element_type}' is missing a valid namespace prefix.",
            NAMESPACE_HINT,
            suggestions[0] if suggestions else EXAMPLE_TYPE,
            suggestions=suggestions,
            action=action,
        )

    def _validate_parent_id(self, element: Dict[str, Any], path: str, parent_id: int) -> None:
        key = PARENT_ID_KEY if PARENT_ID_KEY in element else LEGACY_PARENT_ID_KEY
        value = element.get(key)
        if value is None:
            self._error(
                "missing_parent_id",
                f"{path}.{PARENT_ID_KEY}",
                f"Element must have a {PARENT_ID_KEY} property referencing its parent.",
                "integer",
                parent_id,
            )
        elif not _is_int(value):
            self._error(
                "invalid_parent_id_type",
                f"{path}.{key}",
                f"Element {key} must be an integer, not {_type_name(value)}.",
                "integer",
                parent_id,
            )
        elif value != parent_id:
            self._warning(
                "parent_id_mismatch",
                f"{path}.{key}",
                f"Element {key} ({value}) does not match expected parent id ({parent_id}).",
                expected=parent_id,
                actual=value,
                action=f"Set {key} to {parent_id}.",
            )


def validate_document_tree(tree: Any, max_depth: Optional[int] = None) -> ValidationResult:
    return TreeValidator(max_depth=max_depth).validate(tree)
