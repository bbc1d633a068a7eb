"""Page generation orchestrator.

:class:`PageGenerator` validates a configuration, then assembles the four
artifacts of a cloud page (HTML, CSS, JavaScript and AMPscript) together with
the code resources and notes needed to deploy it.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from cloudpages.exceptions import ConfigurationValidationError, TemplateNotFoundError
from cloudpages.models.component import ComponentDefinition
from cloudpages.models.configuration import PageConfiguration
from cloudpages.models.output import (
    CodeResource,
    GeneratedOutput,
    GeneratedPage,
    PageMetadata,
    PerformanceMetrics,
)
from cloudpages.models.template import PageTemplate
from cloudpages.models.validation import ConfigurationWarning, FieldError, ValidationResult
from cloudpages.services import ampscript, documentation, responsive_generator
from cloudpages.services.component_library import ComponentLibrary, default_component_library
from cloudpages.services.configuration_parser import (
    ConfigFormat,
    collect_warnings,
    generate_default_configuration,
    parse_configuration,
    validate_configuration,
    validate_with_details,
)
from cloudpages.services.frameworks import Breakpoints, get_backend
from cloudpages.services.template_engine import TemplateEngine

logger = logging.getLogger(__name__)

ConfigInput = Union[PageConfiguration, Mapping[str, Any]]

# Size thresholds (bytes) used by the optimization score
LARGE_PAGE_BYTES = 100_000
LARGE_CSS_BYTES = 50_000
LARGE_JS_BYTES = 50_000

MIN_LOAD_TIME_MS = 500.0

FORM_VALIDATION_JS = r"""
/* Form Validation */
document.addEventListener('DOMContentLoaded', function() {
  const forms = document.querySelectorAll('form');

  forms.forEach(form => {
    form.addEventListener('submit', function(e) {
      if (!validateForm(this)) {
        e.preventDefault();
      }
    });
  });

  function validateForm(form) {
    let isValid = true;
    const requiredFields = form.querySelectorAll('[required]');

    requiredFields.forEach(field => {
      if (!field.value.trim()) {
        showError(field, 'This field is required');
        isValid = false;
      } else {
        clearError(field);
      }

      if (field.type === 'email' && field.value) {
        const emailRegex = /^[^\s@]+@[^\s@]+\.[^\s@]+$/;
        if (!emailRegex.test(field.value)) {
          showError(field, 'Please enter a valid email address');
          isValid = false;
        }
      }
    });

    return isValid;
  }

  function showError(field, message) {
    clearError(field);
    const error = document.createElement('div');
    error.className = 'error-message';
    error.textContent = message;
    error.style.color = '#dc3545';
    error.style.fontSize = '14px';
    error.style.marginTop = '5px';
    field.parentNode.appendChild(error);
    field.style.borderColor = '#dc3545';
  }

  function clearError(field) {
    const existingError = field.parentNode.querySelector('.error-message');
    if (existingError) {
      existingError.remove();
    }
    field.style.borderColor = '';
  }
});
"""


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge *overrides* onto *base*: mappings key by key, anything else replaced.

    Lists are replaced wholesale, never concatenated.  Neither input is modified.
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _byte_size(text: Optional[str]) -> int:
    return len(text.encode("utf-8")) if text else 0


def calculate_performance(html: str, css: str, javascript: Optional[str]) -> PerformanceMetrics:
    """Estimate load time and an optimization score from artifact sizes alone."""
    html_size = _byte_size(html)
    css_size = _byte_size(css)
    js_size = _byte_size(javascript)
    total = html_size + css_size + js_size

    score = 100
    if total > LARGE_PAGE_BYTES:
        score -= 20
    if css_size > LARGE_CSS_BYTES:
        score -= 15
    if js_size > LARGE_JS_BYTES:
        score -= 15

    return PerformanceMetrics(
        estimated_load_time=max(MIN_LOAD_TIME_MS, total / 1000),
        css_size=css_size,
        js_size=js_size,
        html_size=html_size,
        optimization_score=max(0, score),
    )


class PageGenerator:
    """Turns page configurations into deployable cloud page artifacts."""

    def __init__(
        self,
        engine: Optional[TemplateEngine] = None,
        library: Optional[ComponentLibrary] = None,
    ) -> None:
        self.engine = engine if engine is not None else TemplateEngine()
        self.library = library if library is not None else default_component_library()

    # ------------------------------------------------------------------
    # Generation entry points
    # ------------------------------------------------------------------

    def generate(self, config: ConfigInput) -> GeneratedOutput:
        """Validate *config* and generate the page.

        Raises:
            ConfigurationValidationError: if *config* violates the schema.
        """
        try:
            page_config = validate_configuration(config)
        except ConfigurationValidationError as exc:
            logger.warning("Rejected configuration: %s", exc)
            raise
        return self._generate_page(page_config)

    def generate_from_text(self, text: str, fmt: ConfigFormat = "json") -> GeneratedOutput:
        try:
            page_config = parse_configuration(text, fmt)
        except ConfigurationValidationError as exc:
            logger.warning("Rejected configuration: %s", exc)
            raise
        return self._generate_page(page_config)

    def generate_from_template(
        self,
        template_id: str,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> GeneratedOutput:
        """Generate a page from a registered template.

        *overrides* uses the camelCase wire format and is deep-merged onto the
        template's configuration.

        Raises:
            TemplateNotFoundError: if *template_id* is not registered.
        """
        template = self.engine.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        merged = template.configuration.to_wire()
        if overrides:
            merged = deep_merge(merged, overrides)
        return self.generate(merged)

    def generate_mobile_first(self, config: ConfigInput) -> GeneratedOutput:
        page_config = validate_configuration(config)
        options = page_config.advanced_options.model_copy(
            update={"responsive": True, "mobile_first": True}
        )
        return self.generate(page_config.model_copy(update={"advanced_options": options}))

    def generate_for_framework(self, config: ConfigInput, framework: str) -> GeneratedOutput:
        page_config = validate_configuration(config)
        overridden = deep_merge(page_config.to_wire(), {"codeResources": {"css": {"framework": framework}}})
        return self.generate(overridden)

    def generate_with_ampscript(
        self,
        config: ConfigInput,
        data_extensions: Optional[Sequence[str]] = None,
    ) -> GeneratedOutput:
        """Generate with AMPscript switched on, adding *data_extensions* to the lookups."""
        page_config = validate_configuration(config)
        merged = list(page_config.advanced_options.data_extension_integration)
        for name in data_extensions or []:
            if name not in merged:
                merged.append(name)
        options = page_config.advanced_options.model_copy(
            update={"ampscript_enabled": True, "data_extension_integration": merged}
        )
        return self.generate(page_config.model_copy(update={"advanced_options": options}))

    # ------------------------------------------------------------------
    # Diagnostics and lookups
    # ------------------------------------------------------------------

    def validate_configuration(self, config: Any) -> ValidationResult:
        result = validate_with_details(config)
        if not result.is_valid:
            return result
        page_config = validate_configuration(config)
        return result.model_copy(
            update={"warnings": result.warnings + self._missing_type_warnings(page_config)}
        )

    def validate_responsive_config(self, config: ConfigInput) -> ValidationResult:
        page_config = validate_configuration(config)
        options = page_config.advanced_options
        errors: List[FieldError] = []
        warnings: List[ConfigurationWarning] = []

        if options.responsive and not any(c.has_responsive_overrides for c in page_config.components):
            warnings.append(
                ConfigurationWarning(
                    field="components",
                    message="Responsive design is enabled but no components have responsive styling defined",
                    suggestion="Add responsive styling to components or disable responsive design",
                )
            )

        if options.mobile_first and not options.responsive:
            errors.append(
                FieldError(
                    field="advancedOptions.mobileFirst",
                    message="Mobile-first design requires responsive design to be enabled",
                    code="MOBILE_FIRST_REQUIRES_RESPONSIVE",
                )
            )

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def get_breakpoints(self, framework: str) -> Breakpoints:
        return responsive_generator.get_breakpoints(framework)

    def list_templates(self, page_type: Optional[str] = None) -> List[PageTemplate]:
        if page_type is None:
            return self.engine.all_templates()
        return self.engine.templates_by_type(page_type)

    def list_components(self, category: Optional[str] = None) -> List[ComponentDefinition]:
        if category is None:
            return self.library.all()
        return self.library.by_category(category)

    def default_configuration(self) -> PageConfiguration:
        return generate_default_configuration()

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _missing_type_warnings(self, config: PageConfiguration) -> List[ConfigurationWarning]:
        return [
            ConfigurationWarning(
                field="components",
                message=f"No component definition for type '{component_type}'; it was rendered as a placeholder comment",
                suggestion="Register a component definition for this type or remove the component",
            )
            for component_type in self.engine.missing_component_types(config)
        ]

    def _generate_page(self, config: PageConfiguration) -> GeneratedOutput:
        started = time.perf_counter()
        page_name = config.page_settings.page_name

        html = self.engine.generate_document(config)
        css = self._build_css(config)
        javascript = self._build_javascript(config)
        amp = self._build_ampscript(config)

        performance = calculate_performance(html, css, javascript)
        page = GeneratedPage(
            html=html,
            css=css,
            javascript=javascript,
            ampscript=amp,
            metadata=PageMetadata(
                page_name=page_name,
                generated_at=datetime.now(timezone.utc),
                framework=config.framework,
                components=[c.type for c in config.components],
                file_size=performance.html_size + performance.css_size + performance.js_size,
                performance=performance,
            ),
        )

        warnings = collect_warnings(config) + self._missing_type_warnings(config)
        for warning in warnings:
            logger.warning("Page %s: %s: %s", page_name, warning.field, warning.message)

        has_javascript = javascript is not None
        output = GeneratedOutput(
            pages=[page],
            code_resources=self._code_resources(config, css, javascript, amp),
            integration_notes=documentation.integration_notes(config, has_javascript),
            testing_guidelines=documentation.testing_guidelines(config),
            deployment_instructions=documentation.deployment_instructions(config, has_javascript),
            warnings=warnings,
        )

        logger.info(
            "Generated page %s (%s): %d bytes in %.1f ms",
            page_name,
            config.framework,
            page.metadata.file_size,
            (time.perf_counter() - started) * 1000,
        )
        return output

    def _build_css(self, config: PageConfiguration) -> str:
        framework = config.framework
        parts = [
            get_backend(framework).base_css,
            responsive_generator.generate_framework_utilities(framework),
            responsive_generator.generate_responsive_image_css(),
        ]

        seen = set()
        for component in config.components:
            if component.type not in seen:
                seen.add(component.type)
                definition = self.engine.components.get(component.type)
                fragment = definition.styles.get(framework) if definition else None
                if fragment:
                    parts.append(f"\n/* {definition.name} Styles */\n{fragment}\n")

        for component in config.components:
            if component.styling and component.styling.custom_css:
                parts.append(f"\n/* Custom styles for {component.id} */\n{component.styling.custom_css}\n")

        if config.advanced_options.responsive:
            parts.append(responsive_generator.generate_responsive_css(config))

        custom_css = config.code_resources.css.custom_css
        if custom_css:
            parts.append(f"\n/* Custom CSS */\n{custom_css}\n")

        return "".join(parts)

    def _build_javascript(self, config: PageConfiguration) -> Optional[str]:
        backend = get_backend(config.framework)
        parts = [backend.base_js]

        if config.advanced_options.responsive:
            parts.append(responsive_generator.generate_navigation_js(backend.breakpoints.tablet))

        if config.has_component_type("form"):
            parts.append(FORM_VALIDATION_JS)

        custom_js = config.code_resources.javascript.custom_js
        if custom_js:
            parts.append(f"\n/* Custom JavaScript */\n{custom_js}\n")

        return "".join(parts).strip() or None

    def _build_ampscript(self, config: PageConfiguration) -> Optional[str]:
        if not config.advanced_options.ampscript_enabled:
            return None
        return ampscript.combine_blocks(ampscript.generate_ampscript_blocks(config)) or None

    def _code_resources(
        self,
        config: PageConfiguration,
        css: str,
        javascript: Optional[str],
        amp: Optional[str],
    ) -> List[CodeResource]:
        page_name = config.page_settings.page_name
        resources = [
            CodeResource(
                type="css",
                name=f"{page_name}-styles",
                content=css,
                description="Generated CSS styles for the cloud page",
            )
        ]
        if javascript:
            resources.append(
                CodeResource(
                    type="javascript",
                    name=f"{page_name}-scripts",
                    content=javascript,
                    description="Generated JavaScript for the cloud page",
                )
            )
        if amp:
            resources.append(
                CodeResource(
                    type="ampscript",
                    name=f"{page_name}-ampscript",
                    content=amp,
                    description="Generated AMPScript for the cloud page",
                )
            )
        return resources
