from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

PropType = Literal["string", "number", "boolean", "array", "object"]


class PropValidation(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    options: Optional[List[Any]] = None


class PropSpec(BaseModel):
    """Schema entry for one component property.

    ``default_factory`` is evaluated each time the component is rendered, for
    defaults that must not be frozen at registration time (the current year,
    for instance).  It takes precedence over ``default``.
    """

    name: str
    type: PropType
    required: bool = False
    default: Any = None
    default_factory: Optional[Callable[[], Any]] = Field(default=None, exclude=True)
    description: Optional[str] = None
    validation: Optional[PropValidation] = None

    def resolve_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


class ComponentDefinition(BaseModel):
    """A reusable, framework-aware component blueprint.

    ``template`` is framework-neutral markup with ``{{name}}`` placeholders;
    ``styles`` maps a framework name to the CSS fragment shipped with the
    component for that framework.
    """

    id: str
    name: str
    category: str
    description: str = ""
    props: List[PropSpec] = []
    template: str
    styles: Dict[str, str] = {}
    ampscript_support: bool = False

    def prop(self, name: str) -> Optional[PropSpec]:
        for spec in self.props:
            if spec.name == name:
                return spec
        return None
