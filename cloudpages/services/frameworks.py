"""Per-framework backend records.

Every framework-dependent fragment the generator emits lives in one
:class:`FrameworkBackend` record, keyed by framework name in
:data:`BACKENDS`.  Supporting a new framework means adding one record here
(plus a style fragment on each component definition); nothing else branches
on the framework name.

Markup skeletons use :meth:`str.format` fields: ``{title}``,
``{description}``, ``{page_name}`` and ``{year}``.
"""

from typing import NamedTuple, Tuple


class Breakpoints(NamedTuple):
    """Pixel widths separating the mobile / tablet / desktop tiers."""

    mobile: int
    tablet: int
    desktop: int


class FrameworkBackend(NamedTuple):
    name: str
    label: str
    head_asset: str
    container_class: str
    fluid_container_class: str
    breakpoints: Breakpoints
    class_map: Tuple[Tuple[str, str], ...]
    base_css: str
    base_js: str
    utilities_css: str
    mobile_css: str
    tablet_css: str
    desktop_css: str
    default_header: str
    default_content: str
    default_footer: str

    def remap_classes(self, markup: str) -> str:
        """Rewrite framework-neutral ``class="..."`` attributes for this framework."""
        for neutral, specific in self.class_map:
            markup = markup.replace(f'class="{neutral}"', f'class="{specific}"')
        return markup


# ---------------------------------------------------------------------------
# Bootstrap 5
# ---------------------------------------------------------------------------

_BOOTSTRAP = FrameworkBackend(
    name="bootstrap",
    label="Bootstrap",
    head_asset=(
        '<link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" '
        'rel="stylesheet">'
    ),
    container_class="container",
    fluid_container_class="container-fluid",
    breakpoints=Breakpoints(mobile=576, tablet=768, desktop=992),
    class_map=(
        ("btn btn-primary", "btn btn-primary"),
        ("form-group", "mb-3"),
        ("form-control", "form-control"),
        ("card", "card"),
        ("container", "container"),
        ("row", "row"),
        ("col", "col"),
    ),
    base_css="""/* Bootstrap Base Styles */
.container { max-width: 1200px; margin: 0 auto; padding: 0 15px; }
.row { display: flex; flex-wrap: wrap; margin: 0 -15px; }
.col { flex: 1; padding: 0 15px; }
.btn { display: inline-block; padding: 0.375rem 0.75rem; margin-bottom: 0; font-size: 1rem; font-weight: 400; line-height: 1.5; text-align: center; text-decoration: none; vertical-align: middle; cursor: pointer; border: 1px solid transparent; border-radius: 0.25rem; }
.btn-primary { color: #fff; background-color: #007bff; border-color: #007bff; }
.form-control { display: block; width: 100%; padding: 0.375rem 0.75rem; font-size: 1rem; line-height: 1.5; color: #495057; background-color: #fff; border: 1px solid #ced4da; border-radius: 0.25rem; }
""",
    base_js="""/* Bootstrap JavaScript */
document.addEventListener('DOMContentLoaded', function() {
  document.querySelectorAll('[data-bs-toggle="collapse"]').forEach(function(toggle) {
    toggle.addEventListener('click', function() {
      const target = document.querySelector(this.getAttribute('data-bs-target'));
      if (target) {
        target.classList.toggle('show');
      }
    });
  });
});
""",
    utilities_css="""
/* Bootstrap Responsive Utilities */
.d-block { display: block !important; }
.d-none { display: none !important; }
.d-flex { display: flex !important; }

@media (max-width: 767.98px) {
  .d-sm-none { display: none !important; }
  .d-sm-block { display: block !important; }
  .text-sm-center { text-align: center !important; }
}

@media (min-width: 768px) {
  .d-md-block { display: block !important; }
  .d-md-none { display: none !important; }
  .d-md-flex { display: flex !important; }
}

@media (min-width: 992px) {
  .d-lg-block { display: block !important; }
  .d-lg-none { display: none !important; }
  .d-lg-flex { display: flex !important; }
}
""",
    mobile_css="""
.container-fluid { padding: 0 15px; }
.row { margin: 0 -10px; }
.col, [class*="col-"] { padding: 0 10px; margin-bottom: 20px; }
.btn { width: 100%; padding: 12px; font-size: 16px; }
.form-control { font-size: 16px; padding: 12px; }
.navbar-toggler { display: block; }
.navbar-collapse { display: none; }
.card { margin-bottom: 20px; }
.hero-section { padding: 40px 0; text-align: center; }
.hero-title { font-size: 2rem; line-height: 1.2; }
.hero-subtitle { font-size: 1.1rem; margin-bottom: 30px; }
body { font-size: 16px; line-height: 1.5; }
""",
    tablet_css="""
  .container { max-width: 750px; }
  .row { margin: 0 -15px; }
  .col, [class*="col-"] { padding: 0 15px; }
  .btn { width: auto; min-width: 150px; }
  .navbar-toggler { display: none; }
  .navbar-collapse { display: flex !important; }
  .hero-section { padding: 60px 0; }
  .hero-title { font-size: 2.5rem; }
  .features-grid { display: grid; grid-template-columns: repeat(2, 1fr); gap: 30px; }
""",
    desktop_css="""
  .container { max-width: 1200px; }
  .hero-section { padding: 100px 0; }
  .hero-title { font-size: 3.5rem; }
  .hero-subtitle { font-size: 1.25rem; }
  .features-grid { grid-template-columns: repeat(3, 1fr); gap: 40px; }
  .newsletter-form { display: flex; align-items: end; gap: 15px; }
  .newsletter-form .form-group { flex: 1; margin-bottom: 0; }
  .newsletter-form .btn { flex-shrink: 0; }
""",
    default_header="""    <header class="navbar navbar-expand-lg navbar-light bg-light">
      <div class="container">
        <a class="navbar-brand" href="#">{title}</a>
      </div>
    </header>
""",
    default_content="""      <div class="row">
        <div class="col-12">
          <h2>Welcome to {title}</h2>
          <p class="lead">{description}</p>
        </div>
      </div>
""",
    default_footer="""    <footer class="bg-light text-center py-3 mt-5">
      <div class="container">
        <p class="mb-0">&copy; {year} {title}. All rights reserved.</p>
      </div>
    </footer>
""",
)


# ---------------------------------------------------------------------------
# Tailwind CSS
# ---------------------------------------------------------------------------

_TAILWIND = FrameworkBackend(
    name="tailwind",
    label="Tailwind",
    head_asset='<script src="https://cdn.tailwindcss.com"></script>',
    container_class="container mx-auto",
    fluid_container_class="w-full",
    breakpoints=Breakpoints(mobile=640, tablet=768, desktop=1024),
    class_map=(
        ("btn btn-primary", "bg-blue-500 hover:bg-blue-700 text-white font-bold py-2 px-4 rounded"),
        ("form-group", "mb-4"),
        (
            "form-control",
            "shadow appearance-none border rounded w-full py-2 px-3 text-gray-700 "
            "leading-tight focus:outline-none focus:shadow-outline",
        ),
        ("card", "bg-white shadow-md rounded px-8 pt-6 pb-8 mb-4"),
        ("container", "container mx-auto px-4"),
        ("row", "flex flex-wrap"),
        ("col", "w-full md:w-1/2 lg:w-1/3 px-4"),
    ),
    base_css="""/* Tailwind Base Styles */
.container { max-width: 1200px; margin: 0 auto; padding: 0 1rem; }
.btn { display: inline-block; padding: 0.5rem 1rem; font-weight: 500; text-align: center; text-decoration: none; border-radius: 0.375rem; transition: all 0.2s; }
.btn-primary { background-color: #3b82f6; color: white; }
.btn-primary:hover { background-color: #2563eb; }
.form-control { display: block; width: 100%; padding: 0.5rem 0.75rem; border: 1px solid #d1d5db; border-radius: 0.375rem; }
.form-control:focus { outline: none; border-color: #3b82f6; box-shadow: 0 0 0 3px rgba(59, 130, 246, 0.1); }
""",
    base_js="",
    utilities_css="""
/* Tailwind Responsive Utilities */
.block { display: block; }
.hidden { display: none; }
.flex { display: flex; }
.grid { display: grid; }

@media (min-width: 768px) {
  .md\\:block { display: block; }
  .md\\:hidden { display: none; }
  .md\\:flex { display: flex; }
  .md\\:grid { display: grid; }
  .md\\:text-left { text-align: left; }
}

@media (min-width: 1024px) {
  .lg\\:block { display: block; }
  .lg\\:hidden { display: none; }
  .lg\\:flex { display: flex; }
  .lg\\:grid { display: grid; }
  .lg\\:text-left { text-align: left; }
}
""",
    mobile_css="""
.container { padding: 0 1rem; }
.grid { grid-template-columns: 1fr; gap: 1rem; }
.btn { width: 100%; padding: 0.75rem; font-size: 1rem; }
.form-input { font-size: 1rem; padding: 0.75rem; }
.nav-menu { display: none; }
.nav-toggle { display: block; }
.card { margin-bottom: 1.25rem; }
.hero { padding: 2.5rem 0; text-align: center; }
.hero-title { font-size: 2rem; line-height: 1.2; }
.hero-subtitle { font-size: 1.125rem; margin-bottom: 2rem; }
body { font-size: 1rem; line-height: 1.5; }
""",
    tablet_css="""
  .container { max-width: 48rem; }
  .grid-cols-2 { grid-template-columns: repeat(2, 1fr); }
  .btn { width: auto; min-width: 9rem; }
  .nav-menu { display: flex; }
  .nav-toggle { display: none; }
  .hero { padding: 3.75rem 0; }
  .hero-title { font-size: 2.5rem; }
  .features-grid { grid-template-columns: repeat(2, 1fr); gap: 2rem; }
""",
    desktop_css="""
  .container { max-width: 64rem; }
  .grid-cols-3 { grid-template-columns: repeat(3, 1fr); }
  .hero { padding: 6.25rem 0; }
  .hero-title { font-size: 3.5rem; }
  .hero-subtitle { font-size: 1.25rem; }
  .features-grid { grid-template-columns: repeat(3, 1fr); gap: 2.5rem; }
  .newsletter-form { display: flex; align-items: end; gap: 1rem; }
  .newsletter-form .form-group { flex: 1; margin-bottom: 0; }
  .newsletter-form .btn { flex-shrink: 0; }
""",
    default_header="""    <header class="bg-white shadow">
      <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8">
        <div class="flex justify-between h-16">
          <div class="flex items-center">
            <h1 class="text-xl font-semibold">{title}</h1>
          </div>
        </div>
      </div>
    </header>
""",
    default_content="""      <div class="py-12">
        <div class="max-w-7xl mx-auto px-4 sm:px-6 lg:px-8">
          <h2 class="text-3xl font-bold text-gray-900">Welcome to {title}</h2>
          <p class="mt-4 text-lg text-gray-600">{description}</p>
        </div>
      </div>
""",
    default_footer="""    <footer class="bg-gray-50 border-t">
      <div class="max-w-7xl mx-auto py-6 px-4 sm:px-6 lg:px-8">
        <p class="text-center text-sm text-gray-500">
          &copy; {year} {title}. All rights reserved.
        </p>
      </div>
    </footer>
""",
)


# ---------------------------------------------------------------------------
# Vanilla CSS (no framework)
# ---------------------------------------------------------------------------

_VANILLA = FrameworkBackend(
    name="vanilla",
    label="Vanilla CSS",
    head_asset="<!-- Vanilla CSS - No framework -->",
    container_class="page-container",
    fluid_container_class="page-container",
    breakpoints=Breakpoints(mobile=480, tablet=768, desktop=1024),
    class_map=(
        ("btn btn-primary", "button button-primary"),
        ("form-group", "form-group"),
        ("form-control", "input"),
        ("card", "card"),
        ("container", "container"),
        ("row", "row"),
        ("col", "column"),
    ),
    base_css="""/* Vanilla CSS Base Styles */
* { box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 1200px; margin: 0 auto; padding: 0 20px; }
.btn, .button { display: inline-block; padding: 12px 24px; background: #007bff; color: white; text-decoration: none; border-radius: 4px; border: none; cursor: pointer; font-size: 16px; }
.btn:hover, .button:hover { background: #0056b3; }
.form-control, .input { width: 100%; padding: 12px; border: 1px solid #ddd; border-radius: 4px; font-size: 16px; }
.form-group { margin-bottom: 20px; }
label { display: block; margin-bottom: 5px; font-weight: bold; }
""",
    base_js="",
    utilities_css="""
/* Vanilla CSS Responsive Utilities */
.show { display: block !important; }
.hide { display: none !important; }
.flex { display: flex !important; }
.grid { display: grid !important; }

@media (max-width: 767px) {
  .mobile-hide { display: none !important; }
  .mobile-show { display: block !important; }
  .mobile-center { text-align: center !important; }
}

@media (min-width: 768px) {
  .tablet-show { display: block !important; }
  .tablet-hide { display: none !important; }
  .tablet-flex { display: flex !important; }
}

@media (min-width: 1024px) {
  .desktop-show { display: block !important; }
  .desktop-hide { display: none !important; }
  .desktop-flex { display: flex !important; }
}
""",
    mobile_css="""
.container { padding: 0 20px; max-width: 100%; }
.grid { display: grid; grid-template-columns: 1fr; gap: 20px; }
.btn { width: 100%; padding: 15px; font-size: 16px; }
.form-control { font-size: 16px; padding: 15px; }
.nav-menu { display: none; }
.nav-toggle { display: block; cursor: pointer; }
.card { margin-bottom: 20px; }
.hero { padding: 60px 0; text-align: center; }
.hero-title { font-size: 2rem; line-height: 1.2; margin-bottom: 20px; }
.hero-subtitle { font-size: 1.1rem; margin-bottom: 30px; }
.features-grid { display: grid; grid-template-columns: 1fr; gap: 30px; }
.feature-card { text-align: center; padding: 30px 20px; }
""",
    tablet_css="""
  .container { max-width: 768px; }
  .grid-2 { grid-template-columns: repeat(2, 1fr); }
  .btn { width: auto; min-width: 150px; }
  .nav-menu { display: flex; }
  .nav-toggle { display: none; }
  .hero { padding: 80px 0; }
  .hero-title { font-size: 2.5rem; }
  .features-grid { grid-template-columns: repeat(2, 1fr); gap: 40px; }
""",
    desktop_css="""
  .container { max-width: 1200px; }
  .grid-3 { grid-template-columns: repeat(3, 1fr); }
  .hero { padding: 120px 0; }
  .hero-title { font-size: 3.5rem; }
  .hero-subtitle { font-size: 1.25rem; }
  .features-grid { grid-template-columns: repeat(3, 1fr); gap: 50px; }
  .newsletter-form { display: flex; align-items: end; gap: 20px; }
  .newsletter-form .form-group { flex: 1; margin-bottom: 0; }
  .newsletter-form .btn { flex-shrink: 0; }
""",
    default_header="""    <header class="site-header">
      <h1>{title}</h1>
    </header>
""",
    default_content="""      <div class="content-section">
        <h2>Welcome to {title}</h2>
        <p>{description}</p>
      </div>
""",
    default_footer="""    <footer class="site-footer">
      <p>&copy; {year} {title}. All rights reserved.</p>
    </footer>
""",
)


BACKENDS = {backend.name: backend for backend in (_BOOTSTRAP, _TAILWIND, _VANILLA)}


def get_backend(framework: str) -> FrameworkBackend:
    """Return the backend record for *framework*.

    Raises:
        KeyError: if the framework is not one of the supported names.
    """
    return BACKENDS[framework]
