"""Exceptions raised by the document service layer.

Validation problems are reported as data (see ``oxytree.models.issues``);
these exceptions cover outcomes a caller has to branch on.
"""
from __future__ import annotations

from typing import Any

from oxytree.models.issues import ValidationResult


class OxytreeError(Exception):
    pass


class DocumentNotFoundError(OxytreeError, LookupError):
    def __init__(self, document_id: int):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class ElementNotFoundError(OxytreeError, LookupError):
    def __init__(self, element_id: Any, document_id: int | None = None):
        where = f" in document {document_id}" if document_id is not None else ""
        super().__init__(f"Element '{element_id}' not found{where}")
        self.element_id = element_id
        self.document_id = document_id


class ClassRemovalError(OxytreeError, ValueError):
    """Raised when a class cannot be removed from an element."""

    def __init__(self, message: str, class_name: str):
        super().__init__(message)
        self.class_name = class_name


class TreeValidationError(OxytreeError, ValueError):
    """Raised when a tree has blocking validation errors."""

    def __init__(self, message: str, result: ValidationResult):
        super().__init__(message)
        self.result = result
