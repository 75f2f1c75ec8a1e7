"""Validation issue and result models (the caller-facing result contract)."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ValidationIssue(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    path: str
    message: str
    expected: Any = None
    example: Any = None
    suggestions: Optional[List[str]] = None
    action: Optional[str] = None
    actual: Any = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "path": self.path,
            "message": self.message,
            "expected": self.expected,
            "example": self.example,
        }
        for key in ("suggestions", "action", "actual"):
            if key in self.model_fields_set:
                payload[key] = getattr(self, key)
        return payload


class ValidationResult(BaseModel):
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors

    @computed_field
    @property
    def error_count(self) -> int:
        return len(self.errors)

    @computed_field
    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def codes(self) -> List[str]:
        return [issue.code for issue in self.errors]

    def warning_codes(self) -> List[str]:
        return [issue.code for issue in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "error_count": self.error_count,
            "warning_count": self.warning_count,
        }
