#!/usr/bin/env python3
"""
Conversion entry points tying the markdown parser to the PPTX renderer.

Three modes are supported:

* single file  -> one presentation
* merge        -> every markdown file of a directory combined into one
                  presentation, in sorted path order
* separate     -> one presentation per markdown file; a failing file is
                  reported and skipped
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .errors import ConversionError, FileNotFound, Md2PptxError
from .markdown_parser import MarkdownParser
from .models import Document, DocumentMetadata, Slide
from .paths import (
    MARKDOWN_EXTENSIONS,
    find_markdown_files,
    output_path_for,
    read_file_to_string,
    validate_file_extension,
)
from .pptx_renderer import PPTXRenderer
from .templates import SlideTemplate, load_custom_template, resolve_template

logger = logging.getLogger(__name__)

TemplateLike = Union[str, SlideTemplate]


class Verbosity(Enum):
    """How much progress narration to emit.  Never affects output bytes."""
    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"

    @property
    def log_level(self) -> int:
        return {
            Verbosity.QUIET: logging.WARNING,
            Verbosity.NORMAL: logging.INFO,
            Verbosity.VERBOSE: logging.DEBUG,
        }[self]


def configure_logging(verbosity: Verbosity = Verbosity.NORMAL) -> None:
    logging.basicConfig(level=verbosity.log_level, format="%(levelname)s  %(message)s", force=True)


class SlideGenerator:
    """
    Main class for generating PowerPoint decks from markdown.
    """

    def __init__(self, template: TemplateLike = "default", debug: bool = False):
        """Create a new :class:`SlideGenerator`.

        Parameters
        ----------
        template
            Built-in template name (``default`` / ``professional`` /
            ``modern`` / ``minimal``) or a resolved :class:`SlideTemplate`.
            Unknown names fall back to ``default``.
        debug
            Emit per-build diagnostics.
        """
        self.debug = debug
        self.template = resolve_template(template)
        self.parser = MarkdownParser()
        self.pptx_renderer = PPTXRenderer(template=self.template, debug=debug)

    def parse(self, markdown_text: str) -> Document:
        return self.parser.parse(markdown_text)

    def build(self, document: Document) -> bytes:
        return self.pptx_renderer.build(document)

    def generate(self, markdown_text: str, output_path: Union[str, Path]) -> Path:
        """
        Generate a PowerPoint presentation from markdown text.

        Args:
            markdown_text: The markdown content to convert
            output_path: Path where the PPTX file should be saved

        Returns:
            Path: The written PPTX file
        """
        document = self.parse(markdown_text)
        logger.info(f"Parsed {len(document.slides)} slides from markdown")
        return self.pptx_renderer.render(document, output_path)


# ----------------------------------------------------------------------
# Merge
# ----------------------------------------------------------------------

def merge_documents(sources: Sequence[Tuple[Path, Document]]) -> Document:
    """
    Concatenate parsed documents in order.

    Slides without a title but with content are titled after their source
    file's stem.  Metadata comes from the first document naming a title or
    author; failing that the title is derived from the first file's parent
    directory.

    Raises:
        ConversionError: If the combined document has no slides.
    """
    combined_slides: List[Slide] = []
    combined_metadata: Optional[DocumentMetadata] = None

    for file_path, document in sources:
        if combined_metadata is None and document.metadata.has_identity():
            combined_metadata = document.metadata

        for slide in document.slides:
            if slide.title is None and slide.content:
                slide.title = Path(file_path).stem
            combined_slides.append(slide)

        logger.debug(f"  Added {len(document.slides)} slides from {file_path}")

    if combined_metadata is None:
        combined_metadata = DocumentMetadata()
        dir_name = Path(sources[0][0]).parent.name if sources else ""
        if dir_name:
            combined_metadata.title = f"{dir_name} Presentation"
        else:
            combined_metadata.title = "Markdown Presentation"

    if not combined_slides:
        raise ConversionError("No slides found in any Markdown files")

    return Document(slides=combined_slides, metadata=combined_metadata)


def parse_and_combine_markdown_files(markdown_files: Sequence[Union[str, Path]],
                                     parser: Optional[MarkdownParser] = None) -> Document:
    """
    Parse each file in order and merge the results.

    Raises:
        ConversionError: If any file fails to parse, or nothing yields a slide.
    """
    parser = parser or MarkdownParser()
    sources = []
    total = len(markdown_files)

    for index, file_path in enumerate(markdown_files, start=1):
        file_path = Path(file_path)
        logger.debug(f"Processing file {index}/{total}: {file_path}")
        content = read_file_to_string(file_path)
        try:
            document = parser.parse(content)
        except Md2PptxError as exc:
            raise ConversionError(f"Failed to parse {file_path}: {exc}") from exc
        sources.append((file_path, document))

    return merge_documents(sources)


# ----------------------------------------------------------------------
# Conversion modes
# ----------------------------------------------------------------------

def convert_markdown_to_pptx(input_dir: Union[str, Path], output_file: Union[str, Path],
                             template: TemplateLike = "default", recursive: bool = False) -> Path:
    """Merge every markdown file under *input_dir* into *output_file*."""
    logger.info("Starting conversion process...")
    markdown_files = find_markdown_files(input_dir, recursive=recursive)
    logger.info(f"Found {len(markdown_files)} Markdown files to process")

    document = parse_and_combine_markdown_files(markdown_files)
    logger.info(f"Parsed Markdown files into {len(document.slides)} slides")

    renderer = PPTXRenderer(template=template)
    logger.debug(f"Using template: {renderer.template.name}")
    logger.info("Building PowerPoint presentation...")
    output = renderer.render(document, output_file)
    logger.info(f"Successfully created PowerPoint file: {output}")
    return output


def convert_single_markdown_file(input_file: Union[str, Path], output_file: Union[str, Path],
                                 template: TemplateLike = "default") -> Path:
    """
    Convert one markdown file.

    Raises:
        FileNotFound: If *input_file* does not exist.
        InvalidFileFormat: If it is not a ``.md`` / ``.markdown`` file.
        ParsingError: If it yields no slides.
    """
    input_file = Path(input_file)
    logger.info(f"Converting single file: {input_file}")
    if not input_file.exists():
        raise FileNotFound(str(input_file))
    validate_file_extension(input_file, *MARKDOWN_EXTENSIONS)

    generator = SlideGenerator(template=template)
    return generator.generate(read_file_to_string(input_file), output_file)


def convert_files_separately(markdown_files: Sequence[Union[str, Path]], output_dir: Union[str, Path],
                             template: TemplateLike = "default") -> int:
    """
    Convert each file to ``<output_dir>/<stem>.pptx``.

    A file that fails is logged and skipped.

    Returns:
        int: Number of files converted

    Raises:
        ConversionError: If no file converted.
    """
    template = resolve_template(template)
    processed = 0

    for file_path in markdown_files:
        logger.debug(f"Processing: {file_path}")
        output_file = output_path_for(file_path, output_dir, processed + 1)
        try:
            convert_single_markdown_file(file_path, output_file, template)
        except (Md2PptxError, OSError) as exc:
            logger.error(f"  ✗ Failed to convert {file_path}: {exc}")
            continue
        processed += 1
        logger.info(f"  ✓ Created: {output_file}")

    if processed == 0:
        raise ConversionError("No files were successfully processed")

    logger.info(f"Successfully processed {processed} out of {len(markdown_files)} files")
    return processed


def convert_separate_files(input_dir: Union[str, Path], output_dir: Union[str, Path],
                           template: TemplateLike = "default", recursive: bool = False) -> int:
    """Convert every markdown file under *input_dir* to its own presentation."""
    logger.info("Starting separate file conversion process...")
    markdown_files = find_markdown_files(input_dir, recursive=recursive)
    logger.info(f"Found {len(markdown_files)} Markdown files to process separately")
    return convert_files_separately(markdown_files, output_dir, template)


# ----------------------------------------------------------------------
# Command line
# ----------------------------------------------------------------------

def _build_parser():
    import argparse

    p = argparse.ArgumentParser(prog="md2pptx", description="Convert Markdown files to PowerPoint presentations.")
    p.add_argument("input", type=Path, help="Input directory containing Markdown files")
    p.add_argument("output", type=Path,
                   help="Output PowerPoint file (.pptx) or output directory for separate files")
    p.add_argument("--template", "-t", default="default",
                   help="Built-in template: default, professional, modern, minimal")
    p.add_argument("--template-file", type=Path, help="JSON file describing a custom template")
    p.add_argument("--recursive", "-r", action="store_true", help="Process subdirectories recursively")
    p.add_argument("--separate", "-s", action="store_true",
                   help="Generate a separate PPTX per Markdown file (output must be a directory)")
    noise = p.add_mutually_exclusive_group()
    noise.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    noise.add_argument("--quiet", "-q", action="store_true", help="Suppress all output except errors")
    return p


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    args = _build_parser().parse_args(argv)

    if args.quiet:
        verbosity = Verbosity.QUIET
    elif args.verbose:
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL
    configure_logging(verbosity)

    input_dir: Path = args.input
    output_path: Path = args.output

    if not input_dir.exists():
        _fail(f"Input directory '{input_dir}' does not exist")
    if not input_dir.is_dir():
        _fail(f"Input path '{input_dir}' is not a directory")

    if args.separate:
        if output_path.exists() and not output_path.is_dir():
            _fail("When using --separate, output path must be a directory")
        try:
            output_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _fail(f"Failed to create output directory '{output_path}': {exc}")
    elif output_path.suffix != ".pptx":
        _fail("Output file must have .pptx extension")

    try:
        template = load_custom_template(args.template_file) if args.template_file else args.template
        if args.separate:
            logger.info(f"Converting Markdown files from {input_dir} to separate PPTX files in {output_path}")
            count = convert_separate_files(input_dir, output_path, template, recursive=args.recursive)
            logger.info(f"✅ Conversion completed successfully! {count} files processed.")
        else:
            logger.info(f"Converting Markdown files from {input_dir} to {output_path}")
            convert_markdown_to_pptx(input_dir, output_path, template, recursive=args.recursive)
            logger.info("✅ Conversion completed successfully!")
    except (Md2PptxError, OSError) as exc:
        _fail(str(exc))

    return 0


if __name__ == "__main__":
    sys.exit(main())
