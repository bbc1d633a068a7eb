"""Mobile-first responsive CSS and the behaviour that goes with it.

Output is built in three tiers: a mobile base with no media query, then a
tablet and a desktop tier gated on ``min-width``.  Per-component overrides
follow, scoped to the component's ``id`` attribute.
"""

from typing import List

from cloudpages.models.configuration import ComponentInstance, PageConfiguration
from cloudpages.services.frameworks import Breakpoints, get_backend


def get_breakpoints(framework: str) -> Breakpoints:
    return get_backend(framework).breakpoints


def generate_responsive_css(config: PageConfiguration) -> str:
    """Return the three framework tiers followed by per-component overrides."""
    backend = get_backend(config.framework)
    breakpoints = backend.breakpoints

    parts = [
        "\n/* Mobile Base Styles (Mobile-First) */\n",
        backend.mobile_css,
        "\n/* Tablet Styles */\n",
        f"@media (min-width: {breakpoints.tablet}px) {{\n",
        backend.tablet_css.lstrip("\n"),
        "}\n",
        "\n/* Desktop Styles */\n",
        f"@media (min-width: {breakpoints.desktop}px) {{\n",
        backend.desktop_css.lstrip("\n"),
        "}\n",
    ]

    for component in config.components:
        if component.has_responsive_overrides:
            parts.extend(_component_rules(component, breakpoints))

    return "".join(parts)


def _scoped_rule(label: str, component_id: str, query: str, declarations: str) -> str:
    return (
        f"\n/* {label} styles for {component_id} */\n"
        f"@media {query} {{\n"
        f"  #{component_id} {{\n"
        f"    {declarations}\n"
        "  }\n"
        "}\n"
    )


def _component_rules(component: ComponentInstance, breakpoints: Breakpoints) -> List[str]:
    overrides = component.styling.responsive
    rules = []
    if overrides.mobile:
        rules.append(
            _scoped_rule(
                "Mobile",
                component.id,
                f"(max-width: {breakpoints.tablet - 1}px)",
                overrides.mobile,
            )
        )
    if overrides.tablet:
        rules.append(
            _scoped_rule(
                "Tablet",
                component.id,
                f"(min-width: {breakpoints.tablet}px) and (max-width: {breakpoints.desktop - 1}px)",
                overrides.tablet,
            )
        )
    if overrides.desktop:
        rules.append(
            _scoped_rule(
                "Desktop",
                component.id,
                f"(min-width: {breakpoints.desktop}px)",
                overrides.desktop,
            )
        )
    return rules


def generate_framework_utilities(framework: str) -> str:
    return get_backend(framework).utilities_css


def generate_navigation_js(collapse_below: int = 768) -> str:
    """Toggle script for ``.nav-toggle`` / ``.nav-menu`` pairs.

    The menu closes on a click outside it and whenever the viewport grows to
    *collapse_below* pixels or wider.
    """
    return f"""
/* Responsive Navigation JavaScript */
document.addEventListener('DOMContentLoaded', function() {{
  const navToggle = document.querySelector('.nav-toggle');
  const navMenu = document.querySelector('.nav-menu');

  if (navToggle && navMenu) {{
    navToggle.addEventListener('click', function() {{
      navMenu.classList.toggle('active');
      this.classList.toggle('active');
    }});

    // Close menu when clicking outside
    document.addEventListener('click', function(e) {{
      if (!navToggle.contains(e.target) && !navMenu.contains(e.target)) {{
        navMenu.classList.remove('active');
        navToggle.classList.remove('active');
      }}
    }});

    window.addEventListener('resize', function() {{
      if (window.innerWidth >= {collapse_below}) {{
        navMenu.classList.remove('active');
        navToggle.classList.remove('active');
      }}
    }});
  }}
}});
"""


_RESPONSIVE_IMAGE_CSS = """
/* Responsive Images */
img {
  max-width: 100%;
  height: auto;
}

.responsive-img {
  width: 100%;
  height: auto;
  object-fit: cover;
}

picture {
  display: block;
}

picture img {
  width: 100%;
  height: auto;
}

/* Responsive video, 16:9 */
.video-responsive {
  position: relative;
  padding-bottom: 56.25%;
  height: 0;
  overflow: hidden;
}

.video-responsive iframe,
.video-responsive object,
.video-responsive embed {
  position: absolute;
  top: 0;
  left: 0;
  width: 100%;
  height: 100%;
}
"""


def generate_responsive_image_css() -> str:
    return _RESPONSIVE_IMAGE_CSS
