"""Parsing, validation and linting of page configurations."""

import json
from collections import Counter
from typing import Any, Dict, List, Literal, Union

import pydantic
import yaml

from cloudpages.config import get_settings
from cloudpages.exceptions import ConfigurationParseError, ConfigurationValidationError
from cloudpages.models.configuration import PageConfiguration
from cloudpages.models.validation import ConfigurationWarning, FieldError, ValidationResult

ConfigFormat = Literal["json", "yaml"]

# Thresholds above which external resources are flagged as a performance risk
MAX_EXTERNAL_STYLESHEETS = 3
MAX_EXTERNAL_SCRIPTS = 5


def parse_configuration(text: str, fmt: ConfigFormat = "json") -> PageConfiguration:
    """Parse *text* as JSON or YAML and validate the result.

    Raises:
        ConfigurationParseError: if the text is malformed or its top level is
            not a mapping.
        ConfigurationValidationError: if the parsed document violates the schema.
    """
    return validate_configuration(load_document(text, fmt))


def load_document(text: str, fmt: ConfigFormat = "json") -> Dict[str, Any]:
    """Decode *text* into a plain mapping without schema validation.

    Raises:
        ConfigurationParseError: if the text is malformed or its top level is
            not a mapping.
    """
    if fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationParseError(fmt, str(exc)) from exc
    elif fmt == "yaml":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationParseError(fmt, str(exc)) from exc
    else:
        raise ValueError(f"Unsupported configuration format '{fmt}'. Use json or yaml.")

    if not isinstance(data, dict):
        raise ConfigurationParseError(fmt, "top-level document must be a mapping")

    return data


def parse_json(text: str) -> PageConfiguration:
    return parse_configuration(text, "json")


def parse_yaml(text: str) -> PageConfiguration:
    return parse_configuration(text, "yaml")


def _field_errors(exc: pydantic.ValidationError) -> List[FieldError]:
    return [
        FieldError(
            field=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
            code=err["type"],
        )
        for err in exc.errors()
    ]


def validate_configuration(config: Union[PageConfiguration, dict]) -> PageConfiguration:
    """Validate *config* against the page schema and return the typed model.

    Raises:
        ConfigurationValidationError: listing every field-level violation.
    """
    if isinstance(config, PageConfiguration):
        return config
    try:
        return PageConfiguration.model_validate(config)
    except pydantic.ValidationError as exc:
        raise ConfigurationValidationError(
            "Configuration validation failed", _field_errors(exc)
        ) from exc


def validate_with_details(config: Any) -> ValidationResult:
    """Validate *config* and return errors and lint warnings without raising."""
    if isinstance(config, PageConfiguration):
        parsed = config
    else:
        try:
            parsed = PageConfiguration.model_validate(config)
        except pydantic.ValidationError as exc:
            return ValidationResult(is_valid=False, errors=_field_errors(exc))

    return ValidationResult(is_valid=True, warnings=collect_warnings(parsed))


def collect_warnings(config: PageConfiguration) -> List[ConfigurationWarning]:
    """Return non-fatal findings for a schema-valid configuration."""
    warnings: List[ConfigurationWarning] = []
    css = config.code_resources.css
    javascript = config.code_resources.javascript
    options = config.advanced_options

    if len(css.external_stylesheets) > MAX_EXTERNAL_STYLESHEETS:
        warnings.append(
            ConfigurationWarning(
                field="codeResources.css.externalStylesheets",
                message="Too many external stylesheets may impact performance",
                suggestion="Consider consolidating stylesheets or using a CSS bundler",
            )
        )

    if len(javascript.external_scripts) > MAX_EXTERNAL_SCRIPTS:
        warnings.append(
            ConfigurationWarning(
                field="codeResources.javascript.externalScripts",
                message="Too many external scripts may impact performance",
                suggestion="Consider consolidating scripts or using async loading",
            )
        )

    if not options.accessibility:
        warnings.append(
            ConfigurationWarning(
                field="advancedOptions.accessibility",
                message="Accessibility is disabled",
                suggestion="Enable accessibility features for better user experience",
            )
        )

    if not options.seo_optimized:
        warnings.append(
            ConfigurationWarning(
                field="advancedOptions.seoOptimized",
                message="SEO optimization is disabled",
                suggestion="Enable SEO optimization for better search visibility",
            )
        )

    positions = Counter(c.position for c in config.components)
    duplicates = sorted(pos for pos, count in positions.items() if count > 1)
    if duplicates:
        warnings.append(
            ConfigurationWarning(
                field="components",
                message=(
                    "Duplicate component positions detected: "
                    + ", ".join(str(pos) for pos in duplicates)
                ),
                suggestion="Ensure each component has a unique position value",
            )
        )

    ids = Counter(c.id for c in config.components)
    duplicate_ids = sorted(cid for cid, count in ids.items() if count > 1)
    if duplicate_ids:
        warnings.append(
            ConfigurationWarning(
                field="components",
                message="Duplicate component ids detected: " + ", ".join(duplicate_ids),
                suggestion="Give each component a unique id; it becomes the HTML id attribute",
            )
        )

    return warnings


def generate_default_configuration() -> PageConfiguration:
    """Return a minimal configuration that always passes validation."""
    return PageConfiguration.model_validate(
        {
            "pageSettings": {
                "pageName": "New Cloud Page",
                "publishedURL": "",
                "pageType": "landing",
                "title": "Welcome to Our Page",
                "description": "A new SFMC cloud page",
                "keywords": [],
            },
            "codeResources": {
                "css": {
                    "framework": get_settings().default_framework,
                    "customCSS": "",
                    "externalStylesheets": [],
                },
                "javascript": {
                    "customJS": "",
                    "externalScripts": [],
                    "ampscriptIntegration": False,
                },
            },
            "advancedOptions": {
                "responsive": True,
                "mobileFirst": True,
                "accessibility": True,
                "seoOptimized": True,
                "ampscriptEnabled": False,
                "dataExtensionIntegration": [],
            },
            "layout": {
                "structure": "single-column",
                "header": True,
                "footer": True,
                "containerWidth": "responsive",
            },
            "components": [],
        }
    )
