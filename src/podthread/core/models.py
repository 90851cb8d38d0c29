"""Element kinds and conversion options"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ElementKind(str, Enum):
    """Token types the converter knows how to handle."""
    document = 'Document'
    head1    = 'head1'
    head2    = 'head2'
    head3    = 'head3'
    head4    = 'head4'
    para     = 'Para'
    verbatim = 'Verbatim'
    data     = 'Data'
    over     = 'over'
    item     = 'item'
    bold     = 'B'
    code     = 'C'
    italic   = 'I'
    file     = 'F'
    link     = 'L'
    nbsp     = 'S'
    escape   = 'E'
    index    = 'X'
    zero     = 'Z'

    @classmethod
    def lookup(cls, name: str) -> Optional['ElementKind']:
        try:
            return cls(name)
        except ValueError:
            return None


CODES = {ElementKind.bold, ElementKind.code, ElementKind.italic, ElementKind.file, ElementKind.nbsp}


class ThreadOptions(BaseModel):
    """Options that change what the converter emits."""
    contents: bool = Field(default=False, description="Emit a table of contents after the header")
    navbar:   bool = Field(default=False, description="Emit a navigation bar after the header")
    style:    str  = Field(default="",    description="Style sheet named in the \\heading macro")
    title:    Optional[str] = Field(default=None, description="Page title; disables NAME detection")
    id:       Optional[str] = Field(default=None, description="Identifier emitted as \\id[] in the header")
