"""Registry of reusable UI components.

A component is data, not behaviour: framework-neutral template markup with
``{{name}}`` placeholders, a property schema and one CSS fragment per
framework.  Rendering is a single-pass text substitution followed by the
framework's fixed class remap table; there is no expression language.
"""

import logging
import re
import threading
from datetime import date
from html import escape
from typing import Any, Dict, List, Mapping, Optional

from cloudpages.models.component import ComponentDefinition, PropSpec, PropValidation
from cloudpages.models.validation import PropValidationResult
from cloudpages.services.frameworks import get_backend

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][\w.-]*)\s*\}\}")


def stringify(value: Any) -> str:
    """Render a property value the way it should appear inside markup."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify(item) for item in value)
    return str(value)


def substitute(template: str, values: Mapping[str, Any]) -> str:
    """Replace every ``{{name}}`` in *template* with ``values[name]``.

    Unknown placeholders are removed.  Substituted text is never rescanned, so
    a value that itself contains ``{{...}}`` is emitted literally.
    """
    return PLACEHOLDER_RE.sub(lambda m: stringify(values.get(m.group(1))), template)


# ---------------------------------------------------------------------------
# List props
# Templates never loop.  A list prop such as ``menuItems`` is pre-rendered into
# a derived ``menuMarkup`` prop by a fixed renderer, and the template only
# references the derived placeholder.
# ---------------------------------------------------------------------------

def _menu_item(item: Mapping[str, Any]) -> str:
    return (
        '        <li class="nav-item">'
        f'<a class="nav-link" href="{escape(stringify(item.get("url", "#")))}">'
        f'{escape(stringify(item.get("text")))}</a></li>'
    )


def _link_item(item: Mapping[str, Any]) -> str:
    return (
        f'        <a href="{escape(stringify(item.get("url", "#")))}">'
        f'{escape(stringify(item.get("text")))}</a>'
    )


def _feature_item(item: Mapping[str, Any]) -> str:
    icon = item.get("icon")
    icon_markup = f'<div class="feature-icon"><i class="{escape(str(icon))}"></i></div>' if icon else ""
    return (
        '      <div class="feature-card">'
        f"{icon_markup}"
        f'<h3 class="feature-title">{escape(stringify(item.get("title")))}</h3>'
        f'<p class="feature-description">{escape(stringify(item.get("description")))}</p>'
        "</div>"
    )


def _form_field(item: Mapping[str, Any]) -> str:
    name = escape(stringify(item.get("name")))
    field_type = stringify(item.get("type") or "text")
    label = escape(stringify(item.get("label") or item.get("name")))
    required = bool(item.get("required"))
    marker = " *" if required else ""
    attrs = " required" if required else ""
    placeholder = item.get("placeholder")
    if placeholder:
        attrs += f' placeholder="{escape(stringify(placeholder))}"'

    if field_type == "textarea":
        control = (
            f'<textarea id="{name}" name="{name}" rows="5" class="form-control"{attrs}></textarea>'
        )
    elif field_type == "select":
        options = "".join(
            f'<option value="{escape(stringify(o))}">{escape(stringify(o))}</option>'
            for o in item.get("options") or []
        )
        control = f'<select id="{name}" name="{name}" class="form-control"{attrs}>{options}</select>'
    else:
        control = (
            f'<input type="{escape(field_type)}" id="{name}" name="{name}" '
            f'class="form-control"{attrs}>'
        )
    return (
        '      <div class="form-group">\n'
        f'        <label for="{name}">{label}{marker}</label>\n'
        f"        {control}\n"
        "      </div>"
    )


# Rendered for a form component that declares no fields of its own
DEFAULT_FORM_FIELDS = (
    {"name": "firstName", "label": "First Name", "type": "text", "required": True},
    {"name": "lastName", "label": "Last Name", "type": "text", "required": True},
    {"name": "email", "label": "Email Address", "type": "email", "required": True},
    {"name": "message", "label": "Message", "type": "textarea", "required": False},
)

_LIST_RENDERERS = {
    "menuItems": ("menuMarkup", _menu_item),
    "links": ("linksMarkup", _link_item),
    "features": ("featuresMarkup", _feature_item),
    "fields": ("fieldsMarkup", _form_field),
}


def expand_list_props(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Return *values* plus the derived ``*Markup`` entries for list props."""
    expanded = dict(values)
    for source, (target, renderer) in _LIST_RENDERERS.items():
        items = values.get(source)
        if target in values or not isinstance(items, (list, tuple)):
            continue
        expanded[target] = "\n".join(
            renderer(item) for item in items if isinstance(item, Mapping)
        )
    return expanded


def _matches_type(value: Any, prop_type: str) -> bool:
    if prop_type == "string":
        return isinstance(value, str)
    if prop_type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value
    if prop_type == "boolean":
        return isinstance(value, bool)
    if prop_type == "array":
        return isinstance(value, (list, tuple))
    if prop_type == "object":
        return isinstance(value, dict)
    return True


def _check_rules(name: str, value: Any, rules: PropValidation) -> List[str]:
    errors: List[str] = []
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)

    if rules.min is not None and is_number and value < rules.min:
        errors.append(f"Property '{name}' must be at least {stringify(rules.min)}")
    if rules.max is not None and is_number and value > rules.max:
        errors.append(f"Property '{name}' must be at most {stringify(rules.max)}")
    if rules.pattern and isinstance(value, str) and not re.search(rules.pattern, value):
        errors.append(f"Property '{name}' does not match required pattern")
    if rules.options is not None and value not in rules.options:
        errors.append(
            f"Property '{name}' must be one of: {', '.join(stringify(o) for o in rules.options)}"
        )
    return errors


class ComponentLibrary:
    """Keyed registry of :class:`ComponentDefinition` objects.

    Registration swaps in a new dict under a lock (copy-on-write), so renders
    running concurrently always read a complete snapshot.
    """

    def __init__(self, components: Optional[List[ComponentDefinition]] = None) -> None:
        self._lock = threading.Lock()
        self._components: Dict[str, ComponentDefinition] = {}
        for component in components or []:
            self.register(component)

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, component_id: str) -> bool:
        return component_id in self._components

    def register(self, component: ComponentDefinition) -> None:
        """Add *component*, replacing any existing definition with the same id."""
        with self._lock:
            updated = dict(self._components)
            updated[component.id] = component
            self._components = updated

    def get(self, component_id: str) -> Optional[ComponentDefinition]:
        return self._components.get(component_id)

    def all(self) -> List[ComponentDefinition]:
        return list(self._components.values())

    def by_category(self, category: str) -> List[ComponentDefinition]:
        return [c for c in self._components.values() if c.category == category]

    def categories(self) -> List[str]:
        return sorted({c.category for c in self._components.values()})

    def style_for(self, component_id: str, framework: str) -> Optional[str]:
        component = self.get(component_id)
        if component is None:
            return None
        return component.styles.get(framework)

    def render(
        self,
        component_id: str,
        framework: str,
        props: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render a component for *framework*.

        Missing props fall back to the schema default.  An unknown id yields an
        HTML comment naming it rather than an exception.
        """
        component = self.get(component_id)
        if component is None:
            logger.debug("Component %s not registered", component_id)
            return f"<!-- Component {component_id} not found -->"

        props = props or {}
        values: Dict[str, Any] = {}
        for spec in component.props:
            if spec.name not in props:
                values[spec.name] = spec.resolve_default()
        values.update(props)

        markup = substitute(component.template, expand_list_props(values))
        return get_backend(framework).remap_classes(markup)

    def validate_props(self, component_id: str, props: Mapping[str, Any]) -> PropValidationResult:
        """Check *props* against the component's property schema."""
        component = self.get(component_id)
        if component is None:
            return PropValidationResult(
                is_valid=False, errors=[f"Component {component_id} not found"]
            )

        errors: List[str] = []
        for spec in component.props:
            value = props.get(spec.name)

            if spec.required and (value is None or value == ""):
                errors.append(f"Property '{spec.name}' is required")
                continue
            if value is None:
                continue

            if not _matches_type(value, spec.type):
                errors.append(f"Property '{spec.name}' must be of type {spec.type}")
                continue

            if spec.validation is not None:
                errors.extend(_check_rules(spec.name, value, spec.validation))

        return PropValidationResult(is_valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Default catalog
# ---------------------------------------------------------------------------

def _current_year() -> str:
    return str(date.today().year)


_NAVBAR = ComponentDefinition(
    id="navbar",
    name="Navigation Bar",
    category="Navigation",
    description="Responsive navigation bar with brand and menu items",
    ampscript_support=True,
    props=[
        PropSpec(name="brand", type="string", required=True, default="Brand"),
        PropSpec(name="brandUrl", type="string", default="#"),
        PropSpec(name="menuItems", type="array", default=[]),
        PropSpec(name="fixed", type="boolean", default=False),
    ],
    template="""<nav class="navbar navbar-expand-lg navbar-light bg-light" data-fixed="{{fixed}}">
  <div class="container">
    <a class="navbar-brand" href="{{brandUrl}}">{{brand}}</a>
    <button class="navbar-toggler nav-toggle" type="button" data-bs-toggle="collapse" data-bs-target="#navbarNav">
      <span class="navbar-toggler-icon"></span>
    </button>
    <div class="collapse navbar-collapse nav-menu" id="navbarNav">
      <ul class="navbar-nav ms-auto">
{{menuMarkup}}
      </ul>
    </div>
  </div>
</nav>""",
    styles={
        "bootstrap": ".navbar { box-shadow: 0 2px 4px rgba(0,0,0,.1); }",
        "tailwind": ".navbar { @apply bg-white shadow-md; }",
        "vanilla": ".navbar { background: #fff; box-shadow: 0 2px 4px rgba(0,0,0,.1); padding: 1rem 0; }",
    },
)

_HERO_SECTION = ComponentDefinition(
    id="hero-section",
    name="Hero Section",
    category="Layout",
    description="Large hero section with background image, title, and CTA",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", required=True, default="Welcome to Our Service"),
        PropSpec(name="subtitle", type="string", default=""),
        PropSpec(name="ctaText", type="string", default="Get Started"),
        PropSpec(name="ctaUrl", type="string", default="#"),
        PropSpec(
            name="backgroundImage",
            type="string",
            default="none",
            description="CSS background-image value, e.g. url('hero.jpg')",
        ),
        PropSpec(name="height", type="string", default="500px"),
    ],
    template="""<section class="hero-section" style="background-image: {{backgroundImage}}; min-height: {{height}};">
  <div class="hero-overlay">
    <div class="container">
      <div class="hero-content">
        <h1 class="hero-title">{{title}}</h1>
        <p class="hero-subtitle">{{subtitle}}</p>
        <a href="{{ctaUrl}}" class="btn btn-primary">{{ctaText}}</a>
      </div>
    </div>
  </div>
</section>""",
    styles={
        "bootstrap": ".hero-section { background-size: cover; background-position: center; display: flex; align-items: center; } .hero-overlay { background: rgba(0,0,0,0.5); width: 100%; } .hero-content { text-align: center; color: white; }",
        "tailwind": ".hero-section { @apply bg-cover bg-center flex items-center; } .hero-overlay { @apply bg-black bg-opacity-50 w-full; } .hero-content { @apply text-center text-white; }",
        "vanilla": ".hero-section { background-size: cover; background-position: center; display: flex; align-items: center; } .hero-overlay { background: rgba(0,0,0,0.5); width: 100%; } .hero-content { text-align: center; color: white; }",
    },
)

_CONTACT_FORM = ComponentDefinition(
    id="contact-form",
    name="Contact Form",
    category="Forms",
    description="Responsive contact form with validation",
    ampscript_support=True,
    props=[
        PropSpec(name="action", type="string", required=True, default="#"),
        PropSpec(
            name="method",
            type="string",
            default="POST",
            validation=PropValidation(options=["GET", "POST"]),
        ),
        PropSpec(name="title", type="string", default="Contact Us"),
        PropSpec(name="submitText", type="string", default="Send Message"),
    ],
    template="""<section class="contact-form-section">
  <div class="container">
    <h2 class="form-title">{{title}}</h2>
    <form action="{{action}}" method="{{method}}" class="contact-form">
      <input type="hidden" name="submitted" value="true">
      <div class="form-group">
        <label for="firstName">First Name *</label>
        <input type="text" id="firstName" name="firstName" class="form-control" required>
      </div>
      <div class="form-group">
        <label for="lastName">Last Name *</label>
        <input type="text" id="lastName" name="lastName" class="form-control" required>
      </div>
      <div class="form-group">
        <label for="email">Email Address *</label>
        <input type="email" id="email" name="email" class="form-control" required>
      </div>
      <div class="form-group">
        <label for="phone">Phone Number</label>
        <input type="tel" id="phone" name="phone" class="form-control">
      </div>
      <div class="form-group">
        <label for="message">Message *</label>
        <textarea id="message" name="message" rows="5" class="form-control" required></textarea>
      </div>
      <button type="submit" class="btn btn-primary">{{submitText}}</button>
    </form>
  </div>
</section>""",
    styles={
        "bootstrap": ".contact-form-section { padding: 60px 0; } .form-title { text-align: center; margin-bottom: 40px; } .contact-form { max-width: 600px; margin: 0 auto; }",
        "tailwind": ".contact-form-section { @apply py-16; } .form-title { @apply text-center mb-10 text-3xl font-bold; } .contact-form { @apply max-w-2xl mx-auto; }",
        "vanilla": ".contact-form-section { padding: 60px 0; } .form-title { text-align: center; margin-bottom: 40px; font-size: 2rem; } .contact-form { max-width: 600px; margin: 0 auto; }",
    },
)

_FEATURE_CARDS = ComponentDefinition(
    id="feature-cards",
    name="Feature Cards",
    category="Content",
    description="Grid of feature cards with icons and descriptions",
    ampscript_support=False,
    props=[
        PropSpec(name="title", type="string", default="Our Features"),
        PropSpec(name="features", type="array", required=True, default=[]),
        PropSpec(
            name="columns",
            type="number",
            default=3,
            validation=PropValidation(min=1, max=4),
        ),
    ],
    template="""<section class="features-section">
  <div class="container">
    <h2 class="section-title">{{title}}</h2>
    <div class="features-grid" data-columns="{{columns}}">
{{featuresMarkup}}
    </div>
  </div>
</section>""",
    styles={
        "bootstrap": '.features-section { padding: 80px 0; } .section-title { text-align: center; margin-bottom: 60px; } .features-grid { display: grid; gap: 30px; } .features-grid[data-columns="3"] { grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); } .feature-card { text-align: center; padding: 30px; border-radius: 8px; box-shadow: 0 4px 6px rgba(0,0,0,0.1); }',
        "tailwind": '.features-section { @apply py-20; } .section-title { @apply text-center mb-16 text-4xl font-bold; } .features-grid { @apply grid gap-8; } .features-grid[data-columns="3"] { @apply grid-cols-1 md:grid-cols-2 lg:grid-cols-3; } .feature-card { @apply text-center p-8 rounded-lg shadow-lg; }',
        "vanilla": ".features-section { padding: 80px 0; } .section-title { text-align: center; margin-bottom: 60px; font-size: 2.5rem; } .features-grid { display: grid; gap: 30px; grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); } .feature-card { text-align: center; padding: 30px; border-radius: 8px; box-shadow: 0 4px 6px rgba(0,0,0,0.1); }",
    },
)

_NEWSLETTER_SIGNUP = ComponentDefinition(
    id="newsletter-signup",
    name="Newsletter Signup",
    category="Forms",
    description="Email newsletter subscription form",
    ampscript_support=True,
    props=[
        PropSpec(name="title", type="string", default="Subscribe to Our Newsletter"),
        PropSpec(
            name="description",
            type="string",
            default="Stay updated with our latest news and offers.",
        ),
        PropSpec(name="action", type="string", required=True, default="#"),
        PropSpec(name="buttonText", type="string", default="Subscribe"),
        PropSpec(name="placeholder", type="string", default="Enter your email address"),
    ],
    template="""<section class="newsletter-section">
  <div class="container">
    <div class="newsletter-content">
      <h2 class="newsletter-title">{{title}}</h2>
      <p class="newsletter-description">{{description}}</p>
      <form action="{{action}}" method="POST" class="newsletter-form">
        <input type="hidden" name="submitted" value="true">
        <div class="form-group">
          <input type="email" name="email" class="form-control" placeholder="{{placeholder}}" required>
          <button type="submit" class="btn btn-primary">{{buttonText}}</button>
        </div>
      </form>
    </div>
  </div>
</section>""",
    styles={
        "bootstrap": ".newsletter-section { background: #f8f9fa; padding: 60px 0; } .newsletter-content { text-align: center; max-width: 600px; margin: 0 auto; } .newsletter-form .form-group { display: flex; gap: 10px; margin-top: 30px; } .newsletter-form input { flex: 1; }",
        "tailwind": ".newsletter-section { @apply bg-gray-50 py-16; } .newsletter-content { @apply text-center max-w-2xl mx-auto; } .newsletter-form .form-group { @apply flex gap-3 mt-8; } .newsletter-form input { @apply flex-1; }",
        "vanilla": ".newsletter-section { background: #f8f9fa; padding: 60px 0; } .newsletter-content { text-align: center; max-width: 600px; margin: 0 auto; } .newsletter-form .form-group { display: flex; gap: 10px; margin-top: 30px; } .newsletter-form input { flex: 1; }",
    },
)

_FOOTER = ComponentDefinition(
    id="footer",
    name="Footer",
    category="Layout",
    description="Site footer with links and copyright",
    ampscript_support=False,
    props=[
        PropSpec(name="companyName", type="string", required=True, default="Company Name"),
        PropSpec(name="year", type="string", default_factory=_current_year),
        PropSpec(name="links", type="array", default=[]),
        PropSpec(name="socialLinks", type="array", default=[]),
    ],
    template="""<footer class="site-footer">
  <div class="container">
    <div class="footer-content">
      <div class="footer-links">
{{linksMarkup}}
      </div>
      <div class="copyright">
        <p>&copy; {{year}} {{companyName}}. All rights reserved.</p>
      </div>
    </div>
  </div>
</footer>""",
    styles={
        "bootstrap": ".site-footer { background: #343a40; color: white; padding: 40px 0 20px; } .footer-content { text-align: center; } .footer-links { margin-bottom: 20px; } .footer-links a { color: #adb5bd; margin: 0 15px; text-decoration: none; } .social-links a { color: #adb5bd; margin: 0 10px; font-size: 1.2rem; }",
        "tailwind": ".site-footer { @apply bg-gray-800 text-white py-10; } .footer-content { @apply text-center; } .footer-links { @apply mb-5; } .footer-links a { @apply text-gray-300 mx-4 no-underline hover:text-white; } .social-links a { @apply text-gray-300 mx-3 text-xl hover:text-white; }",
        "vanilla": ".site-footer { background: #343a40; color: white; padding: 40px 0 20px; } .footer-content { text-align: center; } .footer-links { margin-bottom: 20px; } .footer-links a { color: #adb5bd; margin: 0 15px; text-decoration: none; } .social-links a { color: #adb5bd; margin: 0 10px; font-size: 1.2rem; }",
    },
)

DEFAULT_COMPONENTS = (
    _NAVBAR,
    _HERO_SECTION,
    _CONTACT_FORM,
    _FEATURE_CARDS,
    _NEWSLETTER_SIGNUP,
    _FOOTER,
)


def default_component_library() -> ComponentLibrary:
    """Return a library seeded with the standard component catalog."""
    return ComponentLibrary(list(DEFAULT_COMPONENTS))
