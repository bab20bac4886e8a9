"""
md2pptx: convert Markdown documents to PowerPoint presentations.
"""

from .generator import (
    SlideGenerator,
    Verbosity,
    convert_markdown_to_pptx,
    convert_separate_files,
    convert_single_markdown_file,
)
from .markdown_parser import MarkdownParser, parse_markdown
from .pptx_renderer import PPTXRenderer
from .templates import SlideTemplate, resolve_template

__version__ = "0.1.0"
__all__ = [
    "SlideGenerator",
    "Verbosity",
    "MarkdownParser",
    "PPTXRenderer",
    "SlideTemplate",
    "convert_markdown_to_pptx",
    "convert_separate_files",
    "convert_single_markdown_file",
    "parse_markdown",
    "resolve_template",
]
