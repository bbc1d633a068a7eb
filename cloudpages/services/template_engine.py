"""Page templates and full-document markup generation.

The engine owns two registries: page templates keyed by id, and a
:class:`ComponentLibrary` whose definitions are keyed by component *type*
(``header``, ``hero``, ``form`` ...).  A :class:`ComponentInstance` in a
configuration is rendered by looking up the definition for its type.
"""

import logging
import threading
from datetime import date
from html import escape
from typing import Any, Dict, List, Optional

from cloudpages.models.component import ComponentDefinition, PropSpec
from cloudpages.models.configuration import (
    FRAMEWORKS,
    PAGE_TYPES,
    ComponentInstance,
    PageConfiguration,
)
from cloudpages.models.template import PageTemplate
from cloudpages.services.ampscript import wrap_ampscript
from cloudpages.services.component_library import DEFAULT_FORM_FIELDS, ComponentLibrary
from cloudpages.services.frameworks import get_backend

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Baseline components, one per component type
# ---------------------------------------------------------------------------

def _current_year() -> str:
    return str(date.today().year)


def _default_fields() -> List[Dict[str, Any]]:
    return [dict(field) for field in DEFAULT_FORM_FIELDS]


_HEADER = ComponentDefinition(
    id="header",
    name="Page Header",
    category="Layout",
    description="Page header with brand name and optional tagline",
    props=[
        PropSpec(name="brand", type="string", default="Brand"),
        PropSpec(name="tagline", type="string", default=""),
    ],
    template="""    <header id="{{componentId}}" class="page-header{{extraClasses}}">
      <div class="container">
        <h1 class="page-brand">{{brand}}</h1>
        <p class="page-tagline">{{tagline}}</p>
      </div>
    </header>""",
    styles={
        "bootstrap": ".page-header { padding: 20px 0; border-bottom: 1px solid #dee2e6; } .page-tagline { color: #6c757d; margin: 0; }",
        "tailwind": ".page-header { @apply py-5 border-b border-gray-200; } .page-tagline { @apply text-gray-500 m-0; }",
        "vanilla": ".page-header { padding: 20px 0; border-bottom: 1px solid #ddd; } .page-tagline { color: #666; margin: 0; }",
    },
)

_NAVIGATION = ComponentDefinition(
    id="navigation",
    name="Navigation",
    category="Navigation",
    description="Collapsible navigation bar",
    ampscript_support=True,
    props=[
        PropSpec(name="brand", type="string", default="Brand"),
        PropSpec(name="brandUrl", type="string", default="#"),
        PropSpec(name="menuItems", type="array", default=[]),
    ],
    template="""      <nav id="{{componentId}}" class="navbar navbar-expand-lg{{extraClasses}}">
        <div class="container">
          <a class="navbar-brand" href="{{brandUrl}}">{{brand}}</a>
          <button class="navbar-toggler nav-toggle" type="button" data-bs-toggle="collapse" data-bs-target="#{{componentId}}-menu" aria-label="Toggle navigation">
            <span class="navbar-toggler-icon"></span>
          </button>
          <div class="collapse navbar-collapse nav-menu" id="{{componentId}}-menu">
            <ul class="navbar-nav ms-auto">
{{menuMarkup}}
            </ul>
          </div>
        </div>
      </nav>""",
    styles={
        "bootstrap": ".navbar { box-shadow: 0 2px 4px rgba(0,0,0,.1); }",
        "tailwind": ".navbar { @apply bg-white shadow-md; } .nav-menu ul { @apply flex gap-4 list-none; }",
        "vanilla": ".navbar { background: #fff; box-shadow: 0 2px 4px rgba(0,0,0,.1); padding: 1rem 0; } .nav-menu ul { display: flex; gap: 1rem; list-style: none; margin: 0; padding: 0; }",
    },
)

_HERO = ComponentDefinition(
    id="hero",
    name="Hero Section",
    category="Layout",
    description="Large hero section with title and call-to-action",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", required=True, default="Welcome"),
        PropSpec(name="subtitle", type="string", default=""),
        PropSpec(name="ctaText", type="string", default="Get Started"),
        PropSpec(name="ctaUrl", type="string", default="#"),
    ],
    template="""      <section id="{{componentId}}" class="hero-section{{extraClasses}}">
        <div class="hero-content">
          <h1 class="hero-title">{{title}}</h1>
          <p class="hero-subtitle">{{subtitle}}</p>
          <a href="{{ctaUrl}}" class="btn btn-primary">{{ctaText}}</a>
        </div>
      </section>""",
    styles={
        "bootstrap": ".hero-section { padding: 100px 0; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; text-align: center; }",
        "tailwind": ".hero-section { @apply py-24 bg-gradient-to-r from-blue-500 to-purple-600 text-white text-center; }",
        "vanilla": ".hero-section { padding: 100px 0; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; text-align: center; }",
    },
)

_FORM = ComponentDefinition(
    id="form",
    name="Form",
    category="Forms",
    description="Data capture form posting back to the page",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", default="Contact Us"),
        PropSpec(name="action", type="string", default="#"),
        PropSpec(name="method", type="string", default="POST"),
        PropSpec(name="submitText", type="string", default="Submit"),
        PropSpec(name="fields", type="array", default_factory=_default_fields),
        PropSpec(
            name="dataExtension",
            type="string",
            description="Data extension receiving submissions",
        ),
    ],
    template="""      <section id="{{componentId}}" class="form-section{{extraClasses}}">
        <h2 class="form-title">{{title}}</h2>
        <form action="{{action}}" method="{{method}}" class="page-form">
          <input type="hidden" name="submitted" value="true">
{{fieldsMarkup}}
          <button type="submit" class="btn btn-primary">{{submitText}}</button>
        </form>
      </section>""",
    styles={
        "bootstrap": ".page-form { max-width: 600px; margin: 0 auto; } .page-form label { font-weight: bold; } .form-title { text-align: center; margin-bottom: 2rem; }",
        "tailwind": ".page-form { @apply max-w-xl mx-auto; } .page-form label { @apply font-semibold; } .form-title { @apply text-center mb-8 text-2xl font-bold; }",
        "vanilla": ".page-form { max-width: 600px; margin: 0 auto; } .page-form label { font-weight: bold; } .form-title { text-align: center; margin-bottom: 2rem; }",
    },
)

_CONTENT = ComponentDefinition(
    id="content",
    name="Content Section",
    category="Content",
    description="Free-form content section; the instance content is inserted verbatim",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", default=""),
        PropSpec(name="content", type="string", default=""),
    ],
    template="""      <section id="{{componentId}}" class="content-section{{extraClasses}}">
        <h2 class="section-title">{{title}}</h2>
        <div class="section-body">
{{content}}
        </div>
      </section>""",
    styles={
        "bootstrap": ".content-section { padding: 40px 0; }",
        "tailwind": ".content-section { @apply py-10; }",
        "vanilla": ".content-section { padding: 40px 0; }",
    },
)

_CTA = ComponentDefinition(
    id="cta",
    name="Call to Action",
    category="Content",
    description="Highlighted call-to-action banner",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", default="Ready to get started?"),
        PropSpec(name="description", type="string", default=""),
        PropSpec(name="buttonText", type="string", default="Learn More"),
        PropSpec(name="buttonUrl", type="string", default="#"),
    ],
    template="""      <section id="{{componentId}}" class="cta-section{{extraClasses}}">
        <h2 class="cta-title">{{title}}</h2>
        <p class="cta-description">{{description}}</p>
        <a href="{{buttonUrl}}" class="btn btn-primary">{{buttonText}}</a>
      </section>""",
    styles={
        "bootstrap": ".cta-section { padding: 60px 20px; text-align: center; background: #f8f9fa; border-radius: 0.5rem; }",
        "tailwind": ".cta-section { @apply py-16 px-5 text-center bg-gray-50 rounded-lg; }",
        "vanilla": ".cta-section { padding: 60px 20px; text-align: center; background: #f8f9fa; border-radius: 8px; }",
    },
)

_FOOTER = ComponentDefinition(
    id="footer",
    name="Footer",
    category="Layout",
    description="Page footer with links and copyright",
    props=[
        PropSpec(name="companyName", type="string", default="Company Name"),
        PropSpec(name="year", type="string", default_factory=_current_year),
        PropSpec(name="links", type="array", default=[]),
    ],
    template="""    <footer id="{{componentId}}" class="site-footer{{extraClasses}}">
      <div class="footer-links">
{{linksMarkup}}
      </div>
      <p class="copyright">&copy; {{year}} {{companyName}}. All rights reserved.</p>
    </footer>""",
    styles={
        "bootstrap": ".site-footer { background: #343a40; color: white; padding: 40px 0 20px; text-align: center; } .footer-links a { color: #adb5bd; margin: 0 15px; text-decoration: none; }",
        "tailwind": ".site-footer { @apply bg-gray-800 text-white py-10 text-center; } .footer-links a { @apply text-gray-300 mx-4 no-underline; }",
        "vanilla": ".site-footer { background: #343a40; color: white; padding: 40px 0 20px; text-align: center; } .footer-links a { color: #adb5bd; margin: 0 15px; text-decoration: none; }",
    },
)

BASELINE_COMPONENTS = (_HEADER, _NAVIGATION, _HERO, _FORM, _CONTENT, _CTA, _FOOTER)


def baseline_component_library() -> ComponentLibrary:
    """Return a library with one definition per component type."""
    return ComponentLibrary(list(BASELINE_COMPONENTS))


# ---------------------------------------------------------------------------
# Seed templates, one per (page type, framework)
# ---------------------------------------------------------------------------

_PAGE_TYPE_DETAILS = {
    "landing": ("Landing Page", "Landing Pages", "Welcome to Our Service"),
    "form": ("Contact Form", "Forms", "Contact Us"),
    "preference": ("Preference Center", "Preference Centers", "Manage Your Preferences"),
    "unsubscribe": ("Unsubscribe Page", "Unsubscribe", "Unsubscribe"),
    "custom": ("Custom Page", "Custom", "Custom Page"),
}

# Page types whose seed template posts a form handled by AMPscript
_FORM_PAGE_TYPES = ("form", "preference", "unsubscribe")


def _seed_components(page_type: str) -> List[Dict[str, Any]]:
    if page_type == "landing":
        return [
            {
                "id": "hero",
                "type": "hero",
                "position": 0,
                "props": {
                    "title": "Welcome to Our Service",
                    "subtitle": "Everything you need, in one place.",
                    "ctaText": "Get Started",
                    "ctaUrl": "#signup",
                },
            },
            {
                "id": "intro",
                "type": "content",
                "position": 1,
                "props": {"title": "Why choose us"},
                "content": "<p>Tell your visitors what makes your offer worth their time.</p>",
            },
            {
                "id": "signup-cta",
                "type": "cta",
                "position": 2,
                "props": {"title": "Ready to join?", "buttonText": "Sign Up", "buttonUrl": "#signup"},
            },
        ]
    if page_type == "form":
        return [{"id": "contact-form", "type": "form", "position": 0, "props": {"title": "Contact Us"}}]
    if page_type == "preference":
        return [
            {
                "id": "preference-form",
                "type": "form",
                "position": 0,
                "props": {
                    "title": "Email Preferences",
                    "submitText": "Save Preferences",
                    "fields": [
                        {"name": "email", "label": "Email Address", "type": "email", "required": True},
                        {
                            "name": "frequency",
                            "label": "Email Frequency",
                            "type": "select",
                            "options": ["Weekly", "Monthly", "Quarterly"],
                        },
                    ],
                },
            }
        ]
    if page_type == "unsubscribe":
        return [
            {
                "id": "unsubscribe-form",
                "type": "form",
                "position": 0,
                "props": {
                    "title": "Unsubscribe",
                    "submitText": "Unsubscribe",
                    "fields": [
                        {"name": "email", "label": "Email Address", "type": "email", "required": True},
                        {"name": "reason", "label": "Reason (optional)", "type": "textarea"},
                    ],
                },
            }
        ]
    return []


def _seed_template(framework: str, page_type: str) -> PageTemplate:
    label = get_backend(framework).label
    name, category, title = _PAGE_TYPE_DETAILS[page_type]
    uses_ampscript = page_type in _FORM_PAGE_TYPES
    configuration = PageConfiguration.model_validate(
        {
            "pageSettings": {
                "pageName": f"{label} {name}",
                "publishedURL": "",
                "pageType": page_type,
                "title": title,
                "description": f"{name} built with {label}",
                "keywords": [framework, page_type],
            },
            "codeResources": {
                "css": {"framework": framework},
                "javascript": {"ampscriptIntegration": uses_ampscript},
            },
            "advancedOptions": {"ampscriptEnabled": uses_ampscript},
            "components": _seed_components(page_type),
        }
    )
    return PageTemplate(
        id=f"{framework}-{page_type}",
        name=f"{label} {name}",
        description=f"Responsive {name.lower()} using {label}",
        category=category,
        page_type=page_type,
        framework=framework,
        configuration=configuration,
        tags=[framework, page_type, "responsive"],
    )


def default_templates() -> List[PageTemplate]:
    return [_seed_template(fw, pt) for fw in FRAMEWORKS for pt in PAGE_TYPES]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class TemplateEngine:
    """Template registry plus the document assembler."""

    def __init__(
        self,
        components: Optional[ComponentLibrary] = None,
        templates: Optional[List[PageTemplate]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._templates: Dict[str, PageTemplate] = {}
        self.components = components if components is not None else baseline_component_library()
        for template in default_templates() if templates is None else templates:
            self.register_template(template)

    # -- template registry ---------------------------------------------------

    def register_template(self, template: PageTemplate) -> None:
        with self._lock:
            updated = dict(self._templates)
            updated[template.id] = template
            self._templates = updated

    def get_template(self, template_id: str) -> Optional[PageTemplate]:
        return self._templates.get(template_id)

    def all_templates(self) -> List[PageTemplate]:
        return list(self._templates.values())

    def templates_by_type(self, page_type: str) -> List[PageTemplate]:
        return [t for t in self._templates.values() if t.page_type == page_type]

    def templates_by_framework(self, framework: str) -> List[PageTemplate]:
        return [t for t in self._templates.values() if t.framework == framework]

    # -- components ----------------------------------------------------------

    def has_component(self, component_type: str) -> bool:
        return component_type in self.components

    def missing_component_types(self, config: PageConfiguration) -> List[str]:
        """Return component types used by *config* that have no definition, in first-use order."""
        missing: List[str] = []
        for component in config.components:
            if not self.has_component(component.type) and component.type not in missing:
                missing.append(component.type)
        return missing

    def render_component(self, instance: ComponentInstance, config: PageConfiguration) -> str:
        """Render one placed component, prefixed by its AMPscript when enabled."""
        if not self.has_component(instance.type):
            logger.debug("No definition for component type %s (%s)", instance.type, instance.id)
            return f"      <!-- Component {instance.type} not found -->\n"

        title = config.page_settings.title
        classes = instance.styling.classes if instance.styling else []
        values: Dict[str, Any] = {
            "brand": title,
            "companyName": title,
        }
        values.update(instance.props)
        values["componentId"] = instance.id
        values["extraClasses"] = "".join(f" {cls}" for cls in classes)
        if instance.content is not None:
            values["content"] = instance.content

        markup = self.components.render(instance.type, config.framework, values)

        if config.advanced_options.ampscript_enabled and instance.ampscript and instance.ampscript.strip():
            markup = f"{wrap_ampscript(instance.ampscript)}\n{markup}"

        return f"{markup}\n"

    # -- document ------------------------------------------------------------

    def generate_document(self, config: PageConfiguration) -> str:
        """Return the complete HTML document for *config*."""
        role = ' role="document"' if config.advanced_options.accessibility else ""
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="en"{role}>\n'
            f"{self._head(config)}\n"
            f"{self._body(config)}\n"
            "</html>"
        )

    def _head(self, config: PageConfiguration) -> str:
        settings = config.page_settings
        css = config.code_resources.css
        lines = [
            "<head>",
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        ]

        if config.advanced_options.seo_optimized:
            lines.append(f"  <title>{escape(settings.title, quote=False)}</title>")
            if settings.description:
                lines.append(f'  <meta name="description" content="{escape(settings.description)}">')
            if settings.keywords:
                lines.append(f'  <meta name="keywords" content="{escape(", ".join(settings.keywords))}">')

        lines.append(f"  {get_backend(css.framework).head_asset}")

        for href in css.external_stylesheets:
            lines.append(f'  <link rel="stylesheet" href="{escape(href)}">')

        if css.custom_css:
            lines += ["  <style>", f"    {css.custom_css}", "  </style>"]

        lines.append("</head>")
        return "\n".join(lines)

    def _container_class(self, config: PageConfiguration) -> str:
        backend = get_backend(config.framework)
        if config.layout.container_width == "fluid":
            return backend.fluid_container_class
        return backend.container_class

    def _defaults(self, config: PageConfiguration) -> Dict[str, str]:
        settings = config.page_settings
        return {
            "title": escape(settings.title, quote=False),
            "description": escape(
                settings.description or f"This is the {settings.page_name} cloud page.", quote=False
            ),
            "page_name": escape(settings.page_name, quote=False),
            "year": _current_year(),
        }

    def _find(self, config: PageConfiguration, component_type: str) -> Optional[ComponentInstance]:
        for component in config.components:
            if component.type == component_type:
                return component
        return None

    def _body(self, config: PageConfiguration) -> str:
        backend = get_backend(config.framework)
        defaults = self._defaults(config)
        javascript = config.code_resources.javascript

        parts = ["<body>\n", f'  <div class="{self._container_class(config)}">\n']

        if config.layout.header:
            header = self._find(config, "header")
            if header is not None:
                parts.append(self.render_component(header, config))
            else:
                parts.append(backend.default_header.format(**defaults))

        parts.append(self._main(config))

        if config.layout.footer:
            footer = self._find(config, "footer")
            if footer is not None:
                parts.append(self.render_component(footer, config))
            else:
                parts.append(backend.default_footer.format(**defaults))

        parts.append("  </div>\n")

        for src in javascript.external_scripts:
            parts.append(f'  <script src="{escape(src)}"></script>\n')

        if javascript.custom_js:
            parts.append(f"  <script>\n    {javascript.custom_js}\n  </script>\n")

        parts.append("</body>")
        return "".join(parts)

    def _main(self, config: PageConfiguration) -> str:
        role = ' role="main"' if config.advanced_options.accessibility else ""
        structure = config.layout.structure
        parts = [f'    <main class="main-content layout-{structure}"{role}>\n']

        # sorted() is stable, so equal positions keep declaration order
        body_components = sorted(
            (c for c in config.components if c.type not in ("header", "footer")),
            key=lambda c: c.position,
        )
        for component in body_components:
            parts.append(self.render_component(component, config))

        if not body_components:
            parts.append(get_backend(config.framework).default_content.format(**self._defaults(config)))

        parts.append("    </main>\n")
        return "".join(parts)
