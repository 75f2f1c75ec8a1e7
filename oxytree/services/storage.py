"""Storage and cache-invalidation collaborators."""
from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from oxytree.db_models import DocumentMeta
from oxytree.tree.formats import encode_stored_tree
from oxytree.utils.config import BuilderMode

logger = logging.getLogger(__name__)

CLASSIC_META_KEY = "ct_builder_json"


class DocumentStore(Protocol):
    def load(self, document_id: int) -> Optional[Any]: ...

    def save(self, document_id: int, tree: Dict[str, Any]) -> bool: ...


class CacheInvalidator(Protocol):
    def invalidate(self, document_id: int) -> bool: ...


class SqlDocumentStore:
    """Stores trees as ``{"tree_json_string": ...}`` rows keyed by builder meta key.

    Loading falls back to the classic ``ct_builder_json`` key when the current
    builder key has no row.
    """

    def __init__(self, session_factory: Callable[[], DbSession], mode: BuilderMode = BuilderMode.OXYGEN):
        self.session_factory = session_factory
        self.mode = mode

    @property
    def meta_key(self) -> str:
        return self.mode.tree_meta_key

    def _fetch(self, db: DbSession, document_id: int, meta_key: str) -> Optional[DocumentMeta]:
        return db.execute(
            select(DocumentMeta).where(DocumentMeta.document_id == document_id, DocumentMeta.meta_key == meta_key)
        ).scalar_one_or_none()

    def load(self, document_id: int) -> Optional[Any]:
        with self.session_factory() as db:
            try:
                for meta_key in (self.meta_key, CLASSIC_META_KEY):
                    row = self._fetch(db, document_id, meta_key)
                    if row is not None and row.meta_value:
                        logger.debug("Loaded document", extra={"document_id": document_id, "meta_key": meta_key})
                        return row.meta_value
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to load document", extra={"document_id": document_id})
        return None

    def save(self, document_id: int, tree: Dict[str, Any]) -> bool:
        try:
            payload = json.dumps(encode_stored_tree(tree), ensure_ascii=False)
        except (TypeError, ValueError, RecursionError):
            logger.warning("Tree is not JSON serializable", extra={"document_id": document_id})
            return False
        with self.session_factory() as db:
            try:
                row = self._fetch(db, document_id, self.meta_key)
                if row is None:
                    db.add(DocumentMeta(document_id=document_id, meta_key=self.meta_key, meta_value=payload))
                else:
                    row.meta_value = payload
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to save document", extra={"document_id": document_id})
                return False
        return True

    def save_raw(self, document_id: int, meta_key: str, value: str) -> bool:
        """Write a payload verbatim (imports of legacy data)."""
        with self.session_factory() as db:
            try:
                row = self._fetch(db, document_id, meta_key)
                if row is None:
                    db.add(DocumentMeta(document_id=document_id, meta_key=meta_key, meta_value=value))
                else:
                    row.meta_value = value
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to save document", extra={"document_id": document_id, "meta_key": meta_key})
                return False
        return True


class InMemoryDocumentStore:
    def __init__(self, documents: Optional[Dict[int, Any]] = None):
        self.documents: Dict[int, Any] = dict(documents or {})

    def load(self, document_id: int) -> Optional[Any]:
        return copy.deepcopy(self.documents.get(document_id))

    def save(self, document_id: int, tree: Dict[str, Any]) -> bool:
        self.documents[document_id] = encode_stored_tree(tree)
        return True


class NullCacheInvalidator:
    """Used when no renderer cache is wired up."""

    def invalidate(self, document_id: int) -> bool:
        return False


class RecordingCacheInvalidator:
    def __init__(self, result: bool = True):
        self.result = result
        self.calls: List[int] = []

    def invalidate(self, document_id: int) -> bool:
        self.calls.append(document_id)
        return self.result
