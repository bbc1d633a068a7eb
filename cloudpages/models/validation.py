from typing import List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """One schema violation, addressed by a dotted field path."""

    field: str
    message: str
    code: str


class ConfigurationWarning(BaseModel):
    """A non-fatal finding returned alongside a valid configuration."""

    field: str
    message: str
    suggestion: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[FieldError] = []
    warnings: List[ConfigurationWarning] = []


class PropValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = []
