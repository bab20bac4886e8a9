#!/usr/bin/env python3
"""
PowerPoint renderer: turns a parsed :class:`Document` into PPTX bytes.

The renderer first re-expresses every slide as a :class:`PackageSlide` of
render elements (lists split by numbering, images and tables reduced to
placeholders), then writes every package part into an in-memory zip.
Nothing is cached between builds.
"""

import io
import logging
import uuid
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import PackagingError
from .models import CodeBlock, Document, Heading, Image, ListBlock, Paragraph, Quote, Slide, Table
from .paths import write_file
from .templates import SlideTemplate, resolve_template
from . import xml_parts

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Converted Presentation"
DEFAULT_AUTHOR = "md2pptx"
UNTITLED_SLIDE = "Slide Title"

W3CDTF = "%Y-%m-%dT%H:%M:%SZ"

# Fixed zip entry timestamp keeps archives reproducible.
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

# Vertical advance after each kind of shape, in EMU.
TEXT_STEP = 400000
LIST_STEP = 500000
CODE_STEP = 600000

TEXT_HEIGHT = 1200000
LIST_HEIGHT = 1600000
CODE_HEIGHT = 1200000
PLACEHOLDER_HEIGHT = 600000

CODE_FILL = "F8F8F8"
FIRST_CONTENT_SHAPE_ID = 3


# ----------------------------------------------------------------------
# Render model
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class QuoteText:
    text: str


@dataclass(frozen=True)
class BulletList:
    items: Tuple[str, ...]


@dataclass(frozen=True)
class NumberedList:
    items: Tuple[str, ...]


@dataclass(frozen=True)
class Code:
    content: str
    language: Optional[str] = None


@dataclass(frozen=True)
class ImagePlaceholder:
    alt: str
    url: str = ""


@dataclass(frozen=True)
class TablePlaceholder:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()


RenderElement = Union[Text, QuoteText, BulletList, NumberedList, Code, ImagePlaceholder, TablePlaceholder]


@dataclass
class PackageSlide:
    identity: str
    number: int
    title: Optional[str]
    elements: List[RenderElement] = field(default_factory=list)


@dataclass
class PackageMetadata:
    title: str
    author: str
    created: datetime
    modified: datetime
    slide_count: int
    description: Optional[str] = None


def to_render_element(element) -> RenderElement:
    """Map a slide element onto the shape descriptor that renders it."""
    if isinstance(element, (Heading, Paragraph)):
        return Text(element.text)
    if isinstance(element, ListBlock):
        if element.ordered:
            return NumberedList(tuple(element.items))
        return BulletList(tuple(element.items))
    if isinstance(element, CodeBlock):
        return Code(content=element.code, language=element.language)
    if isinstance(element, Image):
        return ImagePlaceholder(alt=element.alt_text, url=element.url)
    if isinstance(element, Table):
        return TablePlaceholder(headers=tuple(element.headers), rows=tuple(element.rows))
    if isinstance(element, Quote):
        return QuoteText(element.text)
    raise TypeError(f"Unsupported slide element: {element!r}")


def placeholder_text(element: RenderElement) -> str:
    """Bracketed description used for elements without a native shape."""
    if isinstance(element, ImagePlaceholder):
        return f"[Image: {element.alt}]"
    if isinstance(element, TablePlaceholder):
        return f"[Table: {', '.join(element.headers)}]"
    return "[Unsupported element]"


class PPTXRenderer:
    """
    Renderer for converting parsed slides into a PPTX package.
    """

    def __init__(self, template: Union[str, SlideTemplate] = "default", debug: bool = False):
        """Initialize the renderer with a template name or resolved template."""
        self.template = resolve_template(template)
        self.debug = debug

    # ------------------------------------------------------------------
    # Document -> package model
    # ------------------------------------------------------------------

    def _package_slide(self, slide: Slide, number: int) -> PackageSlide:
        return PackageSlide(
            identity=uuid.uuid4().hex,
            number=number,
            title=slide.title,
            elements=[to_render_element(e) for e in slide.content],
        )

    def _package_metadata(self, document: Document, now: datetime) -> PackageMetadata:
        meta = document.metadata
        return PackageMetadata(
            title=meta.title if meta.title is not None else DEFAULT_TITLE,
            author=meta.author if meta.author is not None else DEFAULT_AUTHOR,
            created=now,
            modified=now,
            slide_count=len(document.slides),
            description=meta.description,
        )

    # ------------------------------------------------------------------
    # Slide layout
    # ------------------------------------------------------------------

    def _title_shape(self, slide: PackageSlide) -> str:
        layout = self.template.layout
        title = slide.title if slide.title is not None else UNTITLED_SLIDE
        return xml_parts.shape_xml(
            2, "Title 1", 'type="title"',
            layout.margin_left, layout.margin_top,
            layout.content_width, layout.title_height,
            xml_parts.run_paragraph(title),
        )

    def _content_shapes(self, elements: List[RenderElement]) -> List[str]:
        """
        Lay elements out top to bottom.  Shape ids start at 3 and the
        vertical offset advances by an element-specific step.
        """
        layout = self.template.layout
        x = layout.margin_left
        cx = layout.content_width
        y = layout.content_top
        shapes = []

        for shape_id, element in enumerate(elements, start=FIRST_CONTENT_SHAPE_ID):
            if isinstance(element, (Text, QuoteText)):
                shapes.append(xml_parts.shape_xml(
                    shape_id, f"Content {shape_id}", 'type="body" idx="1"',
                    x, y, cx, TEXT_HEIGHT,
                    xml_parts.run_paragraph(element.text),
                ))
                y += TEXT_STEP
            elif isinstance(element, (BulletList, NumberedList)):
                shapes.append(xml_parts.shape_xml(
                    shape_id, f"Content {shape_id}", 'type="body" idx="1"',
                    x, y, cx, LIST_HEIGHT,
                    xml_parts.list_paragraphs(element.items, numbered=isinstance(element, NumberedList)),
                ))
                y += LIST_STEP
            elif isinstance(element, Code):
                shapes.append(xml_parts.shape_xml(
                    shape_id, f"Code {shape_id}", 'type="body" idx="2"',
                    x, y, cx, CODE_HEIGHT,
                    xml_parts.run_paragraph(element.content, font=self.template.fonts.code_font),
                    fill=CODE_FILL,
                ))
                y += CODE_STEP
            else:
                shapes.append(xml_parts.shape_xml(
                    shape_id, f"Content {shape_id}", 'type="body" idx="2"',
                    x, y, cx, PLACEHOLDER_HEIGHT,
                    xml_parts.run_paragraph(placeholder_text(element)),
                ))
                y += TEXT_STEP
        return shapes

    def slide_part(self, slide: PackageSlide) -> str:
        """XML for one slide part."""
        return xml_parts.slide_xml([self._title_shape(slide)] + self._content_shapes(slide.elements))

    # ------------------------------------------------------------------
    # Package assembly
    # ------------------------------------------------------------------

    def parts(self, document: Document, now: Optional[datetime] = None) -> List[Tuple[str, str]]:
        """
        Every (part name, xml) pair of the package, in archive order.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        slides = [self._package_slide(s, n) for n, s in enumerate(document.slides, start=1)]
        meta = self._package_metadata(document, now)
        count = meta.slide_count

        parts = [
            (xml_parts.CONTENT_TYPES_PART, xml_parts.content_types_xml(count)),
            (xml_parts.ROOT_RELS_PART, xml_parts.root_relationships_xml()),
            (xml_parts.APP_PROPS_PART, xml_parts.app_properties_xml(count)),
            (xml_parts.CORE_PROPS_PART, xml_parts.core_properties_xml(
                meta.title, meta.author,
                meta.created.strftime(W3CDTF), meta.modified.strftime(W3CDTF),
                description=meta.description,
            )),
            (xml_parts.PRESENTATION_PART, xml_parts.presentation_xml(count, self.template)),
            (xml_parts.PRESENTATION_RELS_PART, xml_parts.presentation_relationships_xml(count)),
            (xml_parts.SLIDE_MASTER_PART, xml_parts.slide_master_xml(self.template)),
            (xml_parts.SLIDE_MASTER_RELS_PART, xml_parts.slide_master_relationships_xml()),
            (xml_parts.SLIDE_LAYOUT_PART, xml_parts.slide_layout_xml()),
        ]
        for slide in slides:
            parts.append((xml_parts.slide_part_name(slide.number), self.slide_part(slide)))
            parts.append((xml_parts.slide_rels_part_name(slide.number), xml_parts.slide_relationships_xml()))
        parts.append((xml_parts.THEME_PART, xml_parts.theme_xml(self.template)))
        return parts

    def build(self, document: Document, now: Optional[datetime] = None) -> bytes:
        """
        Assemble the PPTX package in memory.

        Args:
            document: Parsed document
            now: Timestamp for the created/modified properties (defaults to
                the current UTC time)

        Returns:
            bytes: The zipped package

        Raises:
            PackagingError: If writing the archive fails.
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for name, xml in self.parts(document, now):
                    info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    archive.writestr(info, xml.encode("utf-8"))
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
            raise PackagingError(str(exc)) from exc

        data = buffer.getvalue()
        if self.debug:
            logger.debug(f"Built package: {len(document.slides)} slides, {len(data)} bytes")
        return data

    def render(self, document: Document, output_path: Union[str, Path], now: Optional[datetime] = None) -> Path:
        """
        Build the package and write it to *output_path*.

        Returns:
            Path: The written file
        """
        data = self.build(document, now)
        output_path = Path(output_path)
        write_file(output_path, data)
        logger.info(f"Wrote {output_path} ({len(data)} bytes)")
        return output_path
