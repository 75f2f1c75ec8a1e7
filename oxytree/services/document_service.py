"""Document-level operations: load, validate, save, summarize and edit classes.

Every write is a whole-tree read-modify-write through the canonicalizer.
There is no locking; concurrent writers to one document race and the last
save wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from oxytree.errors import DocumentNotFoundError, ElementNotFoundError, TreeValidationError
from oxytree.models.document import DocumentTree
from oxytree.models.issues import ValidationIssue, ValidationResult
from oxytree.services.storage import CacheInvalidator, DocumentStore, NullCacheInvalidator
from oxytree.tree import classes as class_ops
from oxytree.tree.canonical import (
    LEGACY_NEXT_NODE_ID_KEY,
    LOOKUP_TABLE_KEY,
    NEXT_NODE_ID_KEY,
    create_empty_tree,
    ensure_tree_integrity,
    is_valid_tree_structure,
    regenerate_element_ids,
)
from oxytree.tree.formats import decode_stored_tree
from oxytree.tree.schema import check_canonical
from oxytree.tree.stats import count_document_elements, flatten_document_tree, get_document_element_types, tree_stats
from oxytree.tree.walker import find_in_tree, max_depth, node_children, replace_element
from oxytree.utils.config import Settings, settings as default_settings
from oxytree.validation.validator import validate_document_tree

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    success: bool
    document_id: int
    tree: Optional[Dict[str, Any]] = None
    element_count: int = 0
    warnings: List[ValidationIssue] = field(default_factory=list)
    cache_invalidated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "post_id": self.document_id,
            "tree": self.tree,
            "element_count": self.element_count,
        }
        if self.warnings:
            payload["warnings"] = [issue.to_dict() for issue in self.warnings]
            payload["warning_count"] = len(self.warnings)
        return payload


def strip_computed_fields(tree: Dict[str, Any]) -> Dict[str, Any]:
    """Drop fields the canonicalizer owns so they are recomputed on save."""
    return {
        key: value
        for key, value in tree.items()
        if key not in (NEXT_NODE_ID_KEY, LEGACY_NEXT_NODE_ID_KEY, LOOKUP_TABLE_KEY)
    }


class DocumentService:
    def __init__(
        self,
        store: DocumentStore,
        cache: Optional[CacheInvalidator] = None,
        config: Optional[Settings] = None,
    ):
        self.store = store
        self.cache = cache or NullCacheInvalidator()
        self.config = config or default_settings

    # -- reads ---------------------------------------------------------------

    def load_tree(self, document_id: int) -> Dict[str, Any]:
        raw = self.store.load(document_id)
        if raw is None:
            raise DocumentNotFoundError(document_id)
        tree = decode_stored_tree(raw)
        if tree is None:
            logger.warning("Stored document could not be decoded", extra={"document_id": document_id})
            raise DocumentNotFoundError(document_id)
        return tree

    def load_document(self, document_id: int) -> DocumentTree:
        return DocumentTree.model_validate(self.load_tree(document_id))

    def summarize(self, document_id: int) -> Dict[str, Any]:
        tree = self.load_tree(document_id)
        return {
            "post_id": document_id,
            "tree": tree,
            "element_count": count_document_elements(tree),
            "element_types": get_document_element_types(tree),
            "elements": flatten_document_tree(tree),
            "stats": tree_stats(tree),
        }

    def validate_tree(self, tree: Any) -> ValidationResult:
        return validate_document_tree(tree, max_depth=self.config.max_tree_depth)

    # -- writes --------------------------------------------------------------

    def save_tree(self, document_id: int, tree: Any, validate: bool = True) -> SaveResult:
        warnings: List[ValidationIssue] = []
        if validate:
            result = self.validate_tree(tree)
            if not result.valid:
                logger.info(
                    "Rejected document tree",
                    extra={"document_id": document_id, "error_count": result.error_count},
                )
                raise TreeValidationError("Document tree failed validation", result)
            warnings = result.warnings

        if not is_valid_tree_structure(tree):
            return SaveResult(success=False, document_id=document_id, warnings=warnings)

        if isinstance(tree, list):
            canonical = decode_stored_tree(tree)
        else:
            canonical = ensure_tree_integrity(strip_computed_fields(tree))
        problems = check_canonical(canonical) if self._within_depth(canonical) else []
        if problems:
            logger.warning(
                "Canonical tree does not match the builder schema",
                extra={"document_id": document_id, "problems": problems[:5]},
            )
        return self._persist(document_id, canonical, warnings)

    def _within_depth(self, tree: Dict[str, Any]) -> bool:
        root = tree.get("root")
        children = node_children(root) if isinstance(root, dict) else []
        return max_depth(children) <= self.config.max_tree_depth

    def _persist(self, document_id: int, tree: Dict[str, Any], warnings: Sequence[ValidationIssue] = ()) -> SaveResult:
        saved = self.store.save(document_id, tree)
        if not saved:
            logger.warning("Document save failed", extra={"document_id": document_id})
            return SaveResult(success=False, document_id=document_id, warnings=list(warnings))
        invalidated = self.cache.invalidate(document_id)
        logger.info(
            "Saved document tree",
            extra={"document_id": document_id, "cache_invalidated": invalidated},
        )
        return SaveResult(
            success=True,
            document_id=document_id,
            tree=tree,
            element_count=count_document_elements(tree),
            warnings=list(warnings),
            cache_invalidated=invalidated,
        )

    def create_document(self, document_id: int) -> SaveResult:
        return self._persist(document_id, ensure_tree_integrity(create_empty_tree()))

    def clone_document(self, source_id: int, target_id: int) -> SaveResult:
        tree = regenerate_element_ids(self.load_tree(source_id))
        return self._persist(target_id, ensure_tree_integrity(strip_computed_fields(tree)))

    # -- classes -------------------------------------------------------------

    def _locate(self, tree: Dict[str, Any], document_id: int, element_id: Any) -> Dict[str, Any]:
        node = find_in_tree(tree, element_id)
        if node is None:
            raise ElementNotFoundError(element_id, document_id)
        return node

    def get_element_classes(self, document_id: int, element_id: Any) -> Dict[str, Any]:
        node = self._locate(self.load_tree(document_id), document_id, element_id)
        return {
            "element_id": node.get("id"),
            "classes": class_ops.extract_classes(node),
            "custom": class_ops.custom_classes(node),
            "builtin": class_ops.builtin_classes(node),
            "locations": class_ops.class_locations(node),
        }

    def _mutate_element(
        self, document_id: int, element_id: Any, mutate: Callable[[Dict[str, Any]], Dict[str, Any]]
    ) -> SaveResult:
        tree = self.load_tree(document_id)
        node = self._locate(tree, document_id, element_id)
        updated = mutate(node)
        root = tree["root"]
        if node is root:
            tree["root"] = updated
        else:
            root["children"], _ = replace_element(node_children(root), element_id, updated)
        return self._persist(document_id, ensure_tree_integrity(tree))

    def set_element_classes(self, document_id: int, element_id: Any, classes: Sequence[str] | str) -> SaveResult:
        return self._mutate_element(document_id, element_id, lambda node: class_ops.set_classes(node, classes))

    def add_element_classes(self, document_id: int, element_id: Any, classes: Sequence[str] | str) -> SaveResult:
        return self._mutate_element(document_id, element_id, lambda node: class_ops.add_classes(node, classes))

    def remove_element_class(self, document_id: int, element_id: Any, class_name: str) -> SaveResult:
        return self._mutate_element(document_id, element_id, lambda node: class_ops.remove_class(node, class_name))
