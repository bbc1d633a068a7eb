"""Integration, testing and deployment notes shipped with every generated page.

Each document is a fixed Markdown skeleton filled from the configuration.
Numbered steps are numbered as they are emitted, so optional steps never
leave gaps in the sequence.
"""

from typing import Iterable, List

from cloudpages.models.configuration import PageConfiguration


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _numbered(steps: Iterable[str]) -> List[str]:
    return [f"{n}. {step}" for n, step in enumerate(steps, start=1)]


def integration_notes(config: PageConfiguration, has_javascript: bool) -> str:
    settings = config.page_settings
    options = config.advanced_options
    css = config.code_resources.css
    javascript = config.code_resources.javascript

    steps = [
        "Create a new Cloud Page in SFMC",
        "Copy the generated HTML into the page content",
        "Create a CSS code resource and link it to the page",
    ]
    if has_javascript:
        steps.append("Create a JavaScript code resource and link it to the page")
    if options.ampscript_enabled:
        steps.append("Add the AMPScript code to the top of the page content")

    dependencies = [f"- CSS: {url}" for url in css.external_stylesheets]
    dependencies += [f"- JavaScript: {url}" for url in javascript.external_scripts]

    lines = [
        f"# Integration Notes for {settings.page_name}",
        "",
        f"## Framework: {config.framework}",
        "",
        "### Setup Instructions:",
        *_numbered(steps),
        "",
        "### External Dependencies:",
        *(dependencies or ["None"]),
        "",
        "### Configuration Details:",
        f"- Page Type: {settings.page_type}",
        f"- Responsive: {_yes_no(options.responsive)}",
        f"- Mobile First: {_yes_no(options.mobile_first)}",
        f"- Accessibility: {_yes_no(options.accessibility)}",
        f"- SEO Optimized: {_yes_no(options.seo_optimized)}",
        f"- AMPScript Enabled: {_yes_no(options.ampscript_enabled)}",
    ]
    if options.data_extension_integration:
        lines.append(f"- Data Extensions: {', '.join(options.data_extension_integration)}")
    return "\n".join(lines) + "\n"


def testing_guidelines(config: PageConfiguration) -> str:
    options = config.advanced_options

    lines = [
        f"# Testing Guidelines for {config.page_settings.page_name}",
        "",
        "## Browser Testing:",
        "- Test in Chrome, Firefox, Safari, and Edge",
        "- Verify responsive design on mobile devices",
        "- Check form functionality and validation",
        "",
        "## SFMC Testing:",
        "- Test in SFMC Preview mode",
    ]
    if options.ampscript_enabled:
        lines.append("- Verify AMPScript output for a known subscriber and for an anonymous visit")
    if options.data_extension_integration:
        lines.append(
            "- Confirm lookups against: " + ", ".join(options.data_extension_integration)
        )
    lines += [
        "- Check email link tracking",
        "",
        "## Performance Testing:",
        "- Verify page load time < 3 seconds",
        "- Check image optimization",
        "- Validate CSS and JavaScript minification",
        "",
        "## Accessibility Testing:",
    ]
    if options.accessibility:
        lines += [
            "- Run WAVE accessibility checker",
            "- Verify keyboard navigation",
            "- Check screen reader compatibility",
            "- Validate color contrast ratios",
        ]
    else:
        lines.append("- Accessibility features are disabled")

    if config.has_component_type("form"):
        lines += [
            "",
            "## Form Testing:",
            "- Test all form fields and validation",
            "- Verify form submission handling",
            "- Check error message display",
            "- Test required field validation",
        ]
    return "\n".join(lines) + "\n"


def deployment_instructions(config: PageConfiguration, has_javascript: bool) -> str:
    settings = config.page_settings
    options = config.advanced_options
    page_name = settings.page_name

    upload = [
        "Go to Web Studio > Code Resources",
        f'Create new CSS resource: "{page_name}-styles"',
        "Copy and paste the generated CSS content",
    ]
    link = [
        "Return to your Cloud Page",
        "Copy and paste the generated HTML content",
        "Link the CSS code resource in the page settings",
    ]
    if has_javascript:
        upload += [
            f'Create new JavaScript resource: "{page_name}-scripts"',
            "Copy and paste the generated JavaScript content",
        ]
        link.append("Link the JavaScript code resource in the page settings")
    if options.ampscript_enabled:
        link.append("Paste the generated AMPScript above the page HTML")

    lines = [
        f"# Deployment Instructions for {page_name}",
        "",
        "## Step 1: Create Cloud Page",
        *_numbered(
            [
                "Log into SFMC",
                "Navigate to Web Studio > Cloud Pages",
                'Click "Create" > "Cloud Page"',
                f'Enter page name: "{page_name}"',
                f'Set published URL: "{settings.published_url or "your-domain.com/page-url"}"',
            ]
        ),
        "",
        "## Step 2: Upload Code Resources",
        *_numbered(upload),
        "",
        "## Step 3: Configure Page Content",
        *_numbered(link),
        "",
        "## Step 4: Configure Page Settings",
        f"- Page Type: {settings.page_type}",
        f"- Title: {settings.title}",
        f"- Description: {settings.description or 'Not specified'}",
        f"- Keywords: {', '.join(settings.keywords) or 'Not specified'}",
        "",
        "## Step 5: Test and Publish",
        *_numbered(
            [
                'Use "Preview" to test the page',
                "Check responsive design on different devices",
                "Test all interactive elements",
                "Publish the page when ready",
            ]
        ),
        "",
        "## Additional Configuration:",
    ]
    if options.data_extension_integration:
        lines.append(f"- Data Extensions: {', '.join(options.data_extension_integration)}")
    else:
        lines.append("- No data extension integration")
    if options.ampscript_enabled:
        lines.append("- AMPScript is enabled - ensure proper testing")
    else:
        lines.append("- AMPScript is disabled")
    return "\n".join(lines) + "\n"
