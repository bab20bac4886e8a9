"""Exceptions raised by the markdown to PPTX conversion pipeline."""

from __future__ import annotations


class Md2PptxError(Exception):
    """Base class for every conversion failure surfaced to callers."""


class ParsingError(Md2PptxError):
    """Markdown could not be turned into at least one slide."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Markdown parsing error: {message}")


class PackagingError(Md2PptxError):
    """Writing the PPTX container failed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"PowerPoint generation error: {message}")


class FileNotFound(Md2PptxError):
    """An input file or directory does not exist."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"File not found: {self.path}")


class InvalidFileFormat(Md2PptxError):
    """A file has the wrong extension or cannot be decoded."""

    def __init__(self, path: str, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        message = f"Invalid file format: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigurationError(Md2PptxError):
    """Bad input directory, empty input set or unusable template file."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Configuration error: {message}")


class ConversionError(Md2PptxError):
    """Aggregate failure across one or more input files."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Conversion error: {message}")
