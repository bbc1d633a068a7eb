"""Error types raised by the page generator.

Convention:
- ``ConfigurationParseError`` and ``ConfigurationValidationError`` describe
  problems with caller input and are safe to report back verbatim.
- ``TemplateNotFoundError`` is a ``LookupError`` for an explicitly requested
  template id.  Unknown component *types* inside a configuration never raise;
  they render as an inert comment and surface as a warning instead.
"""

from typing import List

from cloudpages.models.validation import FieldError


class CloudPagesError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationParseError(CloudPagesError, ValueError):
    """Raised when configuration text is not valid JSON/YAML."""

    def __init__(self, fmt: str, detail: str) -> None:
        super().__init__(f"Invalid {fmt.upper()} format: {detail}")
        self.format = fmt
        self.detail = detail


class ConfigurationValidationError(CloudPagesError, ValueError):
    """Raised when a configuration violates the page schema.

    ``errors`` holds one :class:`FieldError` per violation.
    """

    def __init__(self, message: str, errors: List[FieldError]) -> None:
        super().__init__(message)
        self.errors = errors

    def __str__(self) -> str:
        details = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        base = super().__str__()
        return f"{base} ({details})" if details else base


class TemplateNotFoundError(CloudPagesError, LookupError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template {template_id} not found")
        self.template_id = template_id
