from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from cloudpages.models.configuration import Framework
from cloudpages.models.validation import ConfigurationWarning


class PerformanceMetrics(BaseModel):
    estimated_load_time: float
    """Rough load time estimate in milliseconds."""
    css_size: int
    js_size: int
    html_size: int
    optimization_score: int = Field(ge=0, le=100)


class PageMetadata(BaseModel):
    page_name: str
    generated_at: datetime
    framework: Framework
    components: List[str]
    file_size: int
    performance: PerformanceMetrics


class GeneratedPage(BaseModel):
    html: str
    css: str
    javascript: Optional[str] = None
    ampscript: Optional[str] = None
    metadata: PageMetadata


class CodeResource(BaseModel):
    type: Literal["css", "javascript", "ampscript"]
    name: str
    content: str
    description: str = ""


class GeneratedOutput(BaseModel):
    pages: List[GeneratedPage]
    code_resources: List[CodeResource]
    integration_notes: str
    testing_guidelines: str
    deployment_instructions: str
    warnings: List[ConfigurationWarning] = []
