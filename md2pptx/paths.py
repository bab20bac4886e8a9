#!/usr/bin/env python3
"""Helpers for locating markdown inputs and writing PPTX outputs.

This module is the single source-of-truth for all filesystem decisions in
the md2pptx package.  Discovery returns markdown files (``.md`` and
``.markdown``) sorted by path so merged decks are reproducible.  Writing
creates any missing parent directories.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from .errors import ConfigurationError, FileNotFound, InvalidFileFormat


__all__ = [
    "MARKDOWN_EXTENSIONS",
    "find_markdown_files",
    "read_file_to_string",
    "write_file",
    "validate_file_extension",
    "output_path_for",
]

MARKDOWN_EXTENSIONS = ("md", "markdown")


def _is_markdown(path: Path) -> bool:
    return path.is_file() and path.suffix[1:] in MARKDOWN_EXTENSIONS


def find_markdown_files(directory: Union[str, Path], *, recursive: bool = False) -> List[Path]:
    """Return the markdown files in *directory*, sorted.

    Parameters
    ----------
    directory
        Directory to scan.
    recursive
        Descend into sub-directories when ``True``.

    Raises
    ------
    FileNotFound
        *directory* does not exist.
    ConfigurationError
        *directory* is not a directory, or holds no markdown files.
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFound(str(directory))
    if not directory.is_dir():
        raise ConfigurationError(f"Path {directory} is not a directory")

    candidates: Iterable[Path] = directory.rglob("*") if recursive else directory.iterdir()
    markdown_files = sorted(p for p in candidates if _is_markdown(p))

    if not markdown_files:
        raise ConfigurationError(f"No Markdown files found in directory: {directory}")
    return markdown_files


def read_file_to_string(path: Union[str, Path]) -> str:
    """Read *path* as UTF-8 text.

    Raises
    ------
    FileNotFound
        *path* does not exist.
    InvalidFileFormat
        *path* is not valid UTF-8.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFound(str(path))
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidFileFormat(path, f"not valid UTF-8: {exc.reason} at byte {exc.start}") from exc


def write_file(path: Union[str, Path], content: bytes) -> None:
    """Write *content* to *path*, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


def validate_file_extension(path: Union[str, Path], *expected: str) -> None:
    """Raise :class:`InvalidFileFormat` unless *path* ends in one of *expected*.

    Extensions are given without the leading dot.
    """
    path = Path(path)
    ext = path.suffix[1:]
    if not ext:
        raise InvalidFileFormat(path, f"has no extension, expected .{' or .'.join(expected)}")
    if ext not in expected:
        raise InvalidFileFormat(path, f"expected .{' or .'.join(expected)}, got .{ext}")


def output_path_for(input_file: Union[str, Path], output_dir: Union[str, Path], index: int = 1) -> Path:
    """``<output_dir>/<input stem>.pptx`` for separate-mode conversion."""
    stem = Path(input_file).stem
    name = f"{stem}.pptx" if stem else f"presentation_{index}.pptx"
    return Path(output_dir) / name
