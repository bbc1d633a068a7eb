from typing import Literal

from pydantic import BaseModel

BlockType = Literal["header", "inline", "footer"]


class AmpscriptBlock(BaseModel):
    type: BlockType
    content: str
    description: str
