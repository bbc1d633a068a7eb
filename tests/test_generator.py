"""Tests for cloudpages.services.generator.PageGenerator."""

import json
import logging

import pytest
from bs4 import BeautifulSoup

from cloudpages.exceptions import ConfigurationParseError, ConfigurationValidationError, TemplateNotFoundError
from cloudpages.models.configuration import PageConfiguration
from cloudpages.services.component_library import ComponentLibrary
from cloudpages.services.generator import (
    FORM_VALIDATION_JS,
    PageGenerator,
    calculate_performance,
    deep_merge,
)
from cloudpages.services.template_engine import BASELINE_COMPONENTS, TemplateEngine


def _data(framework="bootstrap", components=None, **sections):
    data = {
        "pageSettings": {"pageName": "Test Page", "pageType": "landing", "title": "Test Title"},
        "codeResources": {"css": {"framework": framework}},
        "components": components or [],
    }
    data.update(sections)
    return data


@pytest.fixture
def generator():
    return PageGenerator()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestDeepMerge:
    def test_nested_mappings_merge_key_wise(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        assert deep_merge(base, {"a": {"y": 3}}) == {"a": {"x": 1, "y": 3}, "b": 1}

    def test_lists_are_replaced(self):
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_inputs_untouched(self):
        base = {"a": {"x": 1}}
        overrides = {"a": {"x": 2}}
        deep_merge(base, overrides)
        assert base == {"a": {"x": 1}}

    def test_scalar_replaces_mapping(self):
        assert deep_merge({"a": {"x": 1}}, {"a": None}) == {"a": None}


class TestPerformance:
    def test_small_page(self):
        metrics = calculate_performance("<p></p>", "", None)
        assert metrics.estimated_load_time == 500
        assert metrics.optimization_score == 100
        assert metrics.js_size == 0

    def test_utf8_byte_sizes(self):
        metrics = calculate_performance("é", "ü", "€")
        assert (metrics.html_size, metrics.css_size, metrics.js_size) == (2, 2, 3)

    def test_penalties(self):
        metrics = calculate_performance("x" * 10, "c" * 60_000, "j" * 60_000)
        assert metrics.optimization_score == 50
        assert metrics.estimated_load_time == 500

    def test_total_penalty_only(self):
        metrics = calculate_performance("h" * 600_000, "", None)
        assert metrics.optimization_score == 80
        assert metrics.estimated_load_time == pytest.approx(600.0)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class TestGenerate:
    def test_minimal_bootstrap_scenario(self, generator):
        output = generator.generate(_data())
        page = output.pages[0]
        assert "<!DOCTYPE html>" in page.html
        assert "<title>Test Title</title>" in page.html
        assert "Test Page" in page.html
        assert "Welcome to Test Title" in page.html
        assert page.css.startswith("/* Bootstrap Base Styles */")
        assert page.ampscript is None

    def test_tailwind_scenario(self, generator):
        page = generator.generate(_data("tailwind")).pages[0]
        assert "/* Tailwind Base Styles */" in page.css
        assert '<script src="https://cdn.tailwindcss.com"></script>' in page.html
        assert "bootstrap.min.css" not in page.html

    def test_accepts_model(self, generator):
        config = PageConfiguration.model_validate(_data())
        assert generator.generate(config).pages[0].metadata.page_name == "Test Page"

    def test_invalid_configuration_propagates(self, generator, caplog):
        bad = _data()
        bad["pageSettings"]["title"] = ""
        with caplog.at_level(logging.WARNING, logger="cloudpages.services.generator"):
            with pytest.raises(ConfigurationValidationError) as info:
                generator.generate(bad)
        assert info.value.errors[0].field == "pageSettings.title"
        assert "Rejected configuration" in caplog.text

    def test_generate_from_text(self, generator):
        output = generator.generate_from_text(json.dumps(_data("vanilla")), "json")
        assert output.pages[0].metadata.framework == "vanilla"

    def test_generate_from_text_parse_error(self, generator):
        with pytest.raises(ConfigurationParseError):
            generator.generate_from_text("pageSettings: [", "yaml")

    def test_metadata(self, generator):
        components = [
            {"id": "h", "type": "hero", "position": 0},
            {"id": "f", "type": "form", "position": 1},
        ]
        page = generator.generate(_data(components=components)).pages[0]
        metadata = page.metadata
        assert metadata.components == ["hero", "form"]
        assert metadata.framework == "bootstrap"
        assert metadata.generated_at.tzinfo is not None
        performance = metadata.performance
        assert metadata.file_size == performance.html_size + performance.css_size + performance.js_size
        assert performance.html_size == len(page.html.encode("utf-8"))

    def test_logs_one_info_line(self, generator, caplog):
        with caplog.at_level(logging.INFO, logger="cloudpages.services.generator"):
            generator.generate(_data())
        lines = [r for r in caplog.records if r.levelno == logging.INFO]
        assert len(lines) == 1
        assert "Test Page" in lines[0].getMessage()


class TestCssAssembly:
    def test_order(self, generator):
        components = [
            {
                "id": "hero-1",
                "type": "hero",
                "position": 0,
                "styling": {"customCSS": "#hero-1 { color: red; }"},
            }
        ]
        data = _data(components=components)
        data["codeResources"]["css"]["customCSS"] = "body { margin: 0; }"
        css = generator.generate(data).pages[0].css
        markers = [
            "/* Bootstrap Base Styles */",
            "/* Bootstrap Responsive Utilities */",
            "/* Responsive Images */",
            "/* Hero Section Styles */",
            "/* Custom styles for hero-1 */",
            "/* Mobile Base Styles (Mobile-First) */",
            "/* Custom CSS */",
        ]
        positions = [css.index(m) for m in markers]
        assert positions == sorted(positions)

    def test_fragment_once_per_type(self, generator):
        components = [
            {"id": "a", "type": "cta", "position": 0},
            {"id": "b", "type": "cta", "position": 1},
        ]
        css = generator.generate(_data(components=components)).pages[0].css
        assert css.count("/* Call to Action Styles */") == 1

    def test_no_responsive_tiers_when_disabled(self, generator):
        data = _data(advancedOptions={"responsive": False, "mobileFirst": False})
        css = generator.generate(data).pages[0].css
        assert "Mobile Base Styles" not in css


class TestJavascriptAssembly:
    def test_vanilla_without_responsive_has_no_script(self, generator):
        data = _data("vanilla", advancedOptions={"responsive": False, "mobileFirst": False})
        output = generator.generate(data)
        assert output.pages[0].javascript is None
        assert [r.type for r in output.code_resources] == ["css"]

    def test_bootstrap_script_and_navigation(self, generator):
        js = generator.generate(_data()).pages[0].javascript
        assert js.startswith("/* Bootstrap JavaScript */")
        assert "Responsive Navigation JavaScript" in js
        assert "window.innerWidth >= 768" in js

    def test_form_validation_only_with_form(self, generator):
        without = generator.generate(_data()).pages[0].javascript
        assert "/* Form Validation */" not in without
        with_form = generator.generate(
            _data(components=[{"id": "f", "type": "form", "position": 0}])
        ).pages[0].javascript
        assert FORM_VALIDATION_JS.strip() in with_form

    def test_custom_js_last(self, generator):
        data = _data()
        data["codeResources"]["javascript"] = {"customJS": "track();"}
        js = generator.generate(data).pages[0].javascript
        assert js.endswith("track();")


class TestAmpscriptAssembly:
    def test_enabled(self, generator):
        components = [
            {
                "id": "signup",
                "type": "form",
                "position": 0,
                "props": {"fields": [{"name": "email", "type": "email", "required": True}]},
            }
        ]
        output = generator.generate(_data(components=components, advancedOptions={"ampscriptEnabled": True}))
        amp = output.pages[0].ampscript
        assert amp.index("<!-- AMPScript Header -->") < amp.index("<!-- AMPScript Footer -->")
        assert "IsEmailAddress(@email)" in amp
        assert [r.type for r in output.code_resources] == ["css", "javascript", "ampscript"]
        assert output.code_resources[2].name == "Test Page-ampscript"

    def test_form_template_handles_rendered_fields(self, generator):
        page = generator.generate_from_template("bootstrap-form").pages[0]
        soup = BeautifulSoup(page.html, "lxml")
        names = [tag["name"] for tag in soup.select("form input[name], form textarea[name]")]
        assert "email" in names
        assert 'RequestParameter("email")' in page.ampscript
        assert "IsEmailAddress(@email)" in page.ampscript
        for name in names:
            if name != "submitted":
                assert f'"{name}", @{name}' in page.ampscript


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

class TestVariants:
    def test_generate_mobile_first(self, generator):
        data = _data(advancedOptions={"responsive": False, "mobileFirst": False})
        css = generator.generate_mobile_first(data).pages[0].css
        assert "Mobile Base Styles (Mobile-First)" in css

    def test_generate_for_framework(self, generator):
        output = generator.generate_for_framework(_data("bootstrap"), "tailwind")
        assert output.pages[0].metadata.framework == "tailwind"
        assert "/* Tailwind Base Styles */" in output.pages[0].css

    def test_generate_for_unknown_framework(self, generator):
        with pytest.raises(ConfigurationValidationError) as info:
            generator.generate_for_framework(_data(), "foundation")
        assert [e.field for e in info.value.errors] == ["codeResources.css.framework"]

    def test_generate_with_ampscript_merges_data_extensions(self, generator):
        data = _data(advancedOptions={"dataExtensionIntegration": ["Orders"]})
        output = generator.generate_with_ampscript(data, ["Orders", "Loyalty"])
        amp = output.pages[0].ampscript
        assert amp is not None
        assert amp.count('LookupRows("Orders"') == 1
        assert 'LookupRows("Loyalty"' in amp
        assert "Data Extensions: Orders, Loyalty" in output.deployment_instructions

    def test_variants_do_not_mutate_input(self, generator):
        config = PageConfiguration.model_validate(_data())
        generator.generate_with_ampscript(config, ["Orders"])
        generator.generate_for_framework(config, "vanilla")
        assert config.advanced_options.ampscript_enabled is False
        assert config.framework == "bootstrap"


class TestGenerateFromTemplate:
    def test_override_scenario(self, generator):
        template = generator.engine.get_template("bootstrap-landing")
        output = generator.generate_from_template(
            "bootstrap-landing", {"pageSettings": {"pageName": "Custom Page"}}
        )
        page = output.pages[0]
        assert page.metadata.page_name == "Custom Page"
        assert page.metadata.framework == "bootstrap"
        assert page.metadata.components == [c.type for c in template.configuration.components]
        soup = BeautifulSoup(page.html, "lxml")
        assert soup.title.get_text() == template.configuration.page_settings.title

    def test_overridden_lists_are_replaced(self, generator):
        output = generator.generate_from_template(
            "bootstrap-landing",
            {"components": [{"id": "only", "type": "cta", "position": 0}]},
        )
        assert output.pages[0].metadata.components == ["cta"]

    def test_without_overrides(self, generator):
        output = generator.generate_from_template("vanilla-form")
        assert output.pages[0].ampscript is not None

    def test_unknown_template(self, generator):
        with pytest.raises(LookupError) as info:
            generator.generate_from_template("does-not-exist")
        assert isinstance(info.value, TemplateNotFoundError)
        assert "does-not-exist" in str(info.value)
        assert info.value.template_id == "does-not-exist"

    def test_invalid_override(self, generator):
        with pytest.raises(ConfigurationValidationError):
            generator.generate_from_template("bootstrap-landing", {"pageSettings": {"pageType": "blog"}})


# ---------------------------------------------------------------------------
# Warnings and diagnostics
# ---------------------------------------------------------------------------

class TestWarnings:
    def test_unknown_component_type_surfaces_warning(self, caplog):
        library = ComponentLibrary([c for c in BASELINE_COMPONENTS if c.id != "cta"])
        generator = PageGenerator(engine=TemplateEngine(components=library))
        data = _data(components=[{"id": "promo", "type": "cta", "position": 0}])
        with caplog.at_level(logging.WARNING, logger="cloudpages.services.generator"):
            output = generator.generate(data)
        assert "<!-- Component cta not found -->" in output.pages[0].html
        assert any("cta" in w.message for w in output.warnings)
        assert "cta" in caplog.text

    def test_configuration_warnings_included(self, generator):
        components = [
            {"id": "a", "type": "hero", "position": 0},
            {"id": "b", "type": "cta", "position": 0},
        ]
        output = generator.generate(_data(components=components))
        assert [w.field for w in output.warnings] == ["components"]

    def test_clean_configuration_has_no_warnings(self, generator):
        assert generator.generate(_data()).warnings == []


class TestDiagnostics:
    def test_validate_configuration(self, generator):
        result = generator.validate_configuration(_data())
        assert result.is_valid is True

    def test_validate_configuration_invalid(self, generator):
        result = generator.validate_configuration({"pageSettings": {}})
        assert result.is_valid is False

    def test_validate_configuration_reports_missing_types(self):
        library = ComponentLibrary([c for c in BASELINE_COMPONENTS if c.id != "hero"])
        generator = PageGenerator(engine=TemplateEngine(components=library))
        result = generator.validate_configuration(
            _data(components=[{"id": "h", "type": "hero", "position": 0}])
        )
        assert result.is_valid is True
        assert any("hero" in w.message for w in result.warnings)

    def test_mobile_first_requires_responsive(self, generator):
        result = generator.validate_responsive_config(
            _data(advancedOptions={"responsive": False, "mobileFirst": True})
        )
        assert result.is_valid is False
        assert len(result.errors) == 1
        assert result.errors[0].code == "MOBILE_FIRST_REQUIRES_RESPONSIVE"

    def test_responsive_without_overrides_warns(self, generator):
        result = generator.validate_responsive_config(_data())
        assert result.is_valid is True
        assert result.warnings[0].field == "components"

    def test_responsive_with_overrides(self, generator):
        components = [
            {"id": "h", "type": "hero", "position": 0, "styling": {"responsive": {"mobile": "color: red;"}}}
        ]
        result = generator.validate_responsive_config(_data(components=components))
        assert result.is_valid is True
        assert result.warnings == []

    def test_lookups(self, generator):
        assert generator.get_breakpoints("bootstrap").desktop == 992
        assert len(generator.list_templates()) == 15
        assert {t.page_type for t in generator.list_templates("preference")} == {"preference"}
        assert len(generator.list_components()) == 6
        assert {c.id for c in generator.list_components("Layout")} == {"hero-section", "footer"}

    def test_default_configuration_generates(self, generator):
        output = generator.generate(generator.default_configuration())
        assert output.pages[0].metadata.page_name == "New Cloud Page"
