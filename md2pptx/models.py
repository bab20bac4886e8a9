"""
Data models for the markdown-to-slides pipeline.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Heading:
    """A level 3-6 heading kept as slide content."""
    level: int
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class ListBlock:
    """A bullet or numbered list; nested items are flattened in order."""
    items: Tuple[str, ...]
    ordered: bool = False


@dataclass(frozen=True)
class CodeBlock:
    language: Optional[str]
    code: str


@dataclass(frozen=True)
class Image:
    alt_text: str
    url: str


@dataclass(frozen=True)
class Table:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class Quote:
    text: str


SlideElement = Union[Heading, Paragraph, ListBlock, CodeBlock, Image, Table, Quote]


@dataclass
class Slide:
    """
    A single slide: an optional title plus its content elements in
    source order.
    """
    title: Optional[str] = None
    content: List[SlideElement] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True while the slide has neither a title nor any content."""
        return self.title is None and not self.content


@dataclass
class DocumentMetadata:
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    custom_properties: Dict[str, str] = field(default_factory=dict)

    def has_identity(self) -> bool:
        """Whether this metadata names a title or an author."""
        return self.title is not None or self.author is not None


@dataclass
class Document:
    """
    Parsed markdown document. After a successful parse ``slides`` is
    never empty.
    """
    slides: List[Slide] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @property
    def slide_count(self) -> int:
        return len(self.slides)
