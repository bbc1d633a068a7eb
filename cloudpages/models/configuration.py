"""Page configuration models.

The wire format (JSON / YAML) uses camelCase keys such as ``pageSettings`` and
``customCSS``; attributes are snake_case.  Either spelling is accepted on
input, and every model is frozen so a configuration cannot change during a
generation pass.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

PageType = Literal["landing", "form", "preference", "unsubscribe", "custom"]
Framework = Literal["bootstrap", "tailwind", "vanilla"]
ComponentType = Literal["header", "footer", "form", "content", "navigation", "hero", "cta"]
LayoutStructure = Literal["single-column", "two-column", "three-column", "grid", "custom"]

PAGE_TYPES: tuple = ("landing", "form", "preference", "unsubscribe", "custom")
FRAMEWORKS: tuple = ("bootstrap", "tailwind", "vanilla")
COMPONENT_TYPES: tuple = ("header", "footer", "form", "content", "navigation", "hero", "cta")

_HTTP_URL = TypeAdapter(HttpUrl)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _check_url(url: str) -> str:
    # HttpUrl normalises (trailing slash, host case), so keep the original text
    try:
        _HTTP_URL.validate_python(url)
    except ValidationError as exc:
        raise ValueError(f"'{url}' is not an absolute http(s) URL") from exc
    return url


UrlList = List[Annotated[str, AfterValidator(_check_url)]]


class PageSettings(_ConfigModel):
    page_name: str = Field(min_length=1, max_length=100)
    published_url: str = Field(default="", alias="publishedURL")
    page_type: PageType
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    keywords: List[str] = []


class CssResources(_ConfigModel):
    framework: Framework
    custom_css: Optional[str] = Field(default=None, alias="customCSS")
    external_stylesheets: UrlList = []


class JavascriptResources(_ConfigModel):
    custom_js: Optional[str] = Field(default=None, alias="customJS")
    external_scripts: UrlList = []
    ampscript_integration: bool = False


class CodeResources(_ConfigModel):
    css: CssResources
    javascript: JavascriptResources = Field(default_factory=JavascriptResources)


class AdvancedOptions(_ConfigModel):
    responsive: bool = True
    mobile_first: bool = True
    accessibility: bool = True
    seo_optimized: bool = True
    ampscript_enabled: bool = False
    data_extension_integration: List[str] = []


class LayoutConfiguration(_ConfigModel):
    structure: LayoutStructure = "single-column"
    header: bool = True
    footer: bool = True
    sidebar: Optional[Literal["left", "right", "both"]] = None
    container_width: Literal["fluid", "fixed", "responsive"] = "responsive"


class ResponsiveOverrides(_ConfigModel):
    """Raw CSS declarations applied to a component at each breakpoint tier."""

    mobile: Optional[str] = None
    tablet: Optional[str] = None
    desktop: Optional[str] = None


class ComponentStyling(_ConfigModel):
    classes: List[str] = []
    custom_css: Optional[str] = Field(default=None, alias="customCSS")
    responsive: Optional[ResponsiveOverrides] = None


class ComponentInstance(_ConfigModel):
    id: str = Field(min_length=1)
    type: ComponentType
    position: int = Field(ge=0)
    props: Dict[str, Any] = {}
    content: Optional[str] = None
    ampscript: Optional[str] = None
    styling: Optional[ComponentStyling] = None

    @property
    def has_responsive_overrides(self) -> bool:
        return self.styling is not None and self.styling.responsive is not None


class PageConfiguration(_ConfigModel):
    page_settings: PageSettings
    code_resources: CodeResources
    advanced_options: AdvancedOptions = Field(default_factory=AdvancedOptions)
    layout: LayoutConfiguration = Field(default_factory=LayoutConfiguration)
    components: List[ComponentInstance] = []

    @property
    def framework(self) -> Framework:
        return self.code_resources.css.framework

    def has_component_type(self, component_type: str) -> bool:
        return any(c.type == component_type for c in self.components)

    def to_wire(self) -> Dict[str, Any]:
        """Return the configuration as a camelCase dict (the JSON/YAML shape)."""
        return self.model_dump(by_alias=True, exclude_none=True)
