"""
Markdown parser that segments a markdown-it-py token stream into slides.

markdown-it-py produces block tokens with the inline content of each block
stored as children of an ``inline`` token.  We flatten those children in
place so the whole document becomes one linear event stream, then walk it
once with an explicit cursor.  Sub-routines for lists, tables, quotes and
paragraphs consume a variable number of events and return the position
just past their closing marker.
"""
import datetime
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import yaml
from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.front_matter import front_matter_plugin

from .errors import ParsingError
from .models import (
    CodeBlock,
    Document,
    DocumentMetadata,
    Heading,
    Image,
    ListBlock,
    Paragraph,
    Quote,
    Slide,
    Table,
)

logger = logging.getLogger(__name__)

LIST_OPEN = ("bullet_list_open", "ordered_list_open")
LIST_CLOSE = ("bullet_list_close", "ordered_list_close")
LINE_BREAKS = ("softbreak", "hardbreak")

# Markers written around emphasised runs in plain slide text.
STRONG_MARK = "**"
EMPHASIS_MARK = "*"


def flatten_tokens(tokens: Sequence[Token]) -> List[Token]:
    """
    Replace every ``inline`` token by its children.

    ``image`` tokens stay atomic; their alt text lives in their own children
    and is never spliced into the stream.
    """
    events: List[Token] = []
    for token in tokens:
        if token.type == "inline":
            events.extend(token.children or [])
        else:
            events.append(token)
    return events


def _heading_level(token: Token) -> int:
    return int(token.tag[1:])


def _image_from_token(token: Token) -> Image:
    alt = "".join(child.content for child in (token.children or []))
    if not alt:
        alt = token.content
    return Image(alt_text=alt, url=token.attrGet("src") or "")


# ----------------------------------------------------------------------
# Metadata extraction
# ----------------------------------------------------------------------

def extract_title(events: Sequence[Token]) -> Optional[str]:
    """
    Return the text run directly following the first level-1 heading.

    A level-1 heading that does not start with plain text (e.g. one that
    opens with emphasis) is skipped in favour of the next one.
    """
    for i, token in enumerate(events):
        if token.type == "heading_open" and token.tag == "h1":
            if i + 1 < len(events) and events[i + 1].type == "text":
                return events[i + 1].content
    return None


def extract_front_matter(tokens: Sequence[Token]) -> Dict:
    """
    Parse a leading YAML front-matter block, if any.

    Raises:
        ParsingError: If the block is not valid YAML.
    """
    for token in tokens:
        if token.type != "front_matter":
            continue
        try:
            data = yaml.safe_load(token.content)
        except yaml.YAMLError as exc:
            raise ParsingError(f"Invalid front matter: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ParsingError("Front matter must be a mapping")
        return data
    return {}


def build_metadata(events: Sequence[Token], front_matter: Optional[Dict] = None) -> DocumentMetadata:
    """Combine the heading title with front-matter fields."""
    metadata = DocumentMetadata()
    front_matter = front_matter or {}

    for key, value in front_matter.items():
        key = str(key)
        if value is None:
            continue
        if key == "author":
            metadata.author = str(value)
        elif key == "description":
            metadata.description = str(value)
        elif key == "title":
            continue
        elif isinstance(value, (str, int, float, bool, datetime.date)):
            metadata.custom_properties[key] = str(value)
        else:
            logger.debug(f"Ignoring non-scalar front matter key '{key}'")

    title = extract_title(events)
    if title is None and front_matter.get("title") is not None:
        title = str(front_matter["title"])
    metadata.title = title
    return metadata


# ----------------------------------------------------------------------
# Block extractors.  Each takes the index of the opening event and
# returns (value, index just past the matching close event).
# ----------------------------------------------------------------------

def _extract_heading_text(events: Sequence[Token], index: int) -> Tuple[str, int]:
    index += 1
    parts = []
    while index < len(events):
        token = events[index]
        if token.type == "heading_close":
            index += 1
            break
        if token.type in ("text", "code_inline"):
            parts.append(token.content)
        index += 1
    return "".join(parts), index


def _extract_paragraph(events: Sequence[Token], index: int) -> Tuple[str, List[Image], int]:
    index += 1
    parts = []
    images = []
    while index < len(events):
        token = events[index]
        kind = token.type
        if kind == "paragraph_close":
            index += 1
            break
        if kind == "text":
            parts.append(token.content)
        elif kind == "code_inline":
            parts.append(f"`{token.content}`")
        elif kind in ("strong_open", "strong_close"):
            parts.append(STRONG_MARK)
        elif kind in ("em_open", "em_close"):
            parts.append(EMPHASIS_MARK)
        elif kind in LINE_BREAKS:
            parts.append(" ")
        elif kind == "image":
            images.append(_image_from_token(token))
        index += 1
    return "".join(parts), images, index


def _extract_list_items(events: Sequence[Token], index: int) -> Tuple[List[str], int]:
    """
    Collect item texts up to the list's matching close marker.

    Whether the list is numbered is decided by the caller from the opening
    marker; the item walk only gathers text.
    """
    index += 1
    depth = 1
    items: List[str] = []
    current: List[str] = []

    def flush():
        text = "".join(current).strip()
        if text:
            items.append(text)
        current.clear()

    while index < len(events):
        token = events[index]
        kind = token.type
        if kind in LIST_OPEN:
            depth += 1
        elif kind in LIST_CLOSE:
            depth -= 1
            if depth == 0:
                index += 1
                break
        elif kind in ("list_item_open", "list_item_close"):
            flush()
        elif kind == "paragraph_open" and current:
            current.append(" ")
        elif kind == "text":
            current.append(token.content)
        elif kind == "code_inline":
            current.append(f"`{token.content}`")
        elif kind in LINE_BREAKS:
            current.append(" ")
        index += 1
    flush()
    return items, index


def _extract_quote_text(events: Sequence[Token], index: int) -> Tuple[str, int]:
    index += 1
    depth = 1
    parts = []
    while index < len(events):
        token = events[index]
        kind = token.type
        if kind == "blockquote_open":
            depth += 1
        elif kind == "blockquote_close":
            depth -= 1
            if depth == 0:
                index += 1
                break
        elif kind == "paragraph_open" and parts:
            parts.append(" ")
        elif kind == "text":
            parts.append(token.content)
        elif kind == "code_inline":
            parts.append(f"`{token.content}`")
        elif kind in LINE_BREAKS:
            parts.append(" ")
        index += 1
    return "".join(parts), index


def _extract_table_data(events: Sequence[Token], index: int) -> Tuple[Table, int]:
    index += 1
    headers: List[str] = []
    rows: List[Tuple[str, ...]] = []
    row: List[str] = []
    cell: List[str] = []
    in_header = False

    while index < len(events):
        token = events[index]
        kind = token.type
        if kind == "table_close":
            index += 1
            break
        if kind == "thead_open":
            in_header = True
        elif kind == "thead_close":
            in_header = False
        elif kind == "tr_open":
            row = []
        elif kind == "tr_close":
            # Header cells went straight into ``headers``.
            if not in_header and row:
                rows.append(tuple(row))
        elif kind in ("th_open", "td_open"):
            cell = []
        elif kind in ("th_close", "td_close"):
            text = "".join(cell).strip()
            if in_header:
                headers.append(text)
            else:
                row.append(text)
        elif kind == "text":
            cell.append(token.content)
        elif kind == "code_inline":
            cell.append(f"`{token.content}`")
        index += 1
    return Table(headers=tuple(headers), rows=tuple(rows)), index


def _extract_code_block(token: Token) -> CodeBlock:
    if token.type == "fence":
        language = token.info.strip() or None
    else:
        language = None
    return CodeBlock(language=language, code=token.content)


# ----------------------------------------------------------------------
# Segmentation
# ----------------------------------------------------------------------

def segment(events: Sequence[Token], metadata: Optional[DocumentMetadata] = None) -> Document:
    """
    Group a flat event stream into slides.

    Level-1 and level-2 headings open a new slide; every other block
    becomes content of the slide being accumulated.

    Raises:
        ParsingError: If the stream yields no slide at all.
    """
    document = Document(metadata=metadata or DocumentMetadata())
    current = Slide()
    index = 0

    while index < len(events):
        token = events[index]
        kind = token.type

        if kind == "heading_open":
            level = _heading_level(token)
            text, index = _extract_heading_text(events, index)
            if level <= 2:
                if not current.is_empty():
                    document.slides.append(current)
                    current = Slide()
                current.title = text
            else:
                current.content.append(Heading(level=level, text=text))

        elif kind == "paragraph_open":
            text, images, index = _extract_paragraph(events, index)
            if text.strip():
                current.content.append(Paragraph(text=text))
            current.content.extend(images)

        elif kind in LIST_OPEN:
            ordered = kind == "ordered_list_open"
            items, index = _extract_list_items(events, index)
            current.content.append(ListBlock(items=tuple(items), ordered=ordered))

        elif kind in ("fence", "code_block"):
            current.content.append(_extract_code_block(token))
            index += 1

        elif kind == "image":
            current.content.append(_image_from_token(token))
            index += 1

        elif kind == "blockquote_open":
            text, index = _extract_quote_text(events, index)
            current.content.append(Quote(text=text))

        elif kind == "table_open":
            table, index = _extract_table_data(events, index)
            current.content.append(table)

        else:
            index += 1

    if not current.is_empty():
        document.slides.append(current)

    if not document.slides:
        raise ParsingError("No slides found in markdown document")

    logger.debug(f"Segmented {len(events)} events into {len(document.slides)} slides")
    return document


class MarkdownParser:
    """
    Markdown to :class:`Document` parser using markdown-it-py.
    """

    def __init__(self):
        # CommonMark plus GFM tables; YAML front matter is tokenized so it
        # never leaks into slide content.
        self.markdown_processor = (
            MarkdownIt("commonmark")
                .enable("table")
                .use(front_matter_plugin)
        )

    def tokenize(self, markdown_text: str) -> List[Token]:
        """Block-level tokens for *markdown_text*."""
        return self.markdown_processor.parse(markdown_text)

    def events(self, markdown_text: str) -> List[Token]:
        """Flat event stream for *markdown_text*."""
        return flatten_tokens(self.tokenize(markdown_text))

    def parse(self, markdown_text: str) -> Document:
        """
        Parse markdown text into slides.

        Args:
            markdown_text: Raw markdown content

        Returns:
            Document with at least one slide

        Raises:
            ParsingError: If no slide could be produced or the front
                matter is malformed.
        """
        tokens = self.tokenize(markdown_text)
        events = flatten_tokens(tokens)
        metadata = build_metadata(events, extract_front_matter(tokens))
        return segment(events, metadata)


def parse_markdown(markdown_text: str) -> Document:
    """Convenience wrapper around :meth:`MarkdownParser.parse`."""
    return MarkdownParser().parse(markdown_text)
