from typing import List

from pydantic import BaseModel

from cloudpages.models.configuration import Framework, PageConfiguration, PageType


class PageTemplate(BaseModel):
    """A named, ready-to-generate page configuration."""

    id: str
    name: str
    description: str
    category: str
    page_type: PageType
    framework: Framework
    configuration: PageConfiguration
    tags: List[str] = []
