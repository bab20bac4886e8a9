"""Test markdown discovery and file helpers."""

import pytest

from md2pptx.errors import ConfigurationError, FileNotFound, InvalidFileFormat
from md2pptx.paths import (
    find_markdown_files,
    output_path_for,
    read_file_to_string,
    validate_file_extension,
    write_file,
)


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "test1.md").write_text("# Test 1", encoding="utf-8")
    (tmp_path / "test2.markdown").write_text("# Test 2", encoding="utf-8")
    (tmp_path / "test.txt").write_text("Not markdown", encoding="utf-8")
    sub_dir = tmp_path / "subdir"
    sub_dir.mkdir()
    (sub_dir / "test3.md").write_text("# Test 3", encoding="utf-8")
    return tmp_path


def test_find_markdown_files_non_recursive(tree):
    files = find_markdown_files(tree)

    assert [f.name for f in files] == ["test1.md", "test2.markdown"]


def test_find_markdown_files_recursive(tree):
    files = find_markdown_files(tree, recursive=True)

    assert [f.relative_to(tree).as_posix() for f in files] == [
        "subdir/test3.md", "test1.md", "test2.markdown",
    ]


def test_find_markdown_files_missing_dir(tmp_path):
    with pytest.raises(FileNotFound):
        find_markdown_files(tmp_path / "missing")


def test_find_markdown_files_not_a_directory(tree):
    with pytest.raises(ConfigurationError, match="is not a directory"):
        find_markdown_files(tree / "test.txt")


def test_find_markdown_files_empty(tmp_path):
    (tmp_path / "readme.txt").write_text("x", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="No Markdown files found"):
        find_markdown_files(tmp_path)


def test_read_and_write(tmp_path):
    target = tmp_path / "a" / "b" / "out.bin"

    write_file(target, b"payload")

    assert target.read_bytes() == b"payload"
    with pytest.raises(FileNotFound):
        read_file_to_string(tmp_path / "nope.md")


def test_validate_file_extension():
    validate_file_extension("test.pptx", "pptx")
    validate_file_extension("notes.markdown", "md", "markdown")

    with pytest.raises(InvalidFileFormat) as exc_info:
        validate_file_extension("notes.txt", "md", "markdown")
    assert exc_info.value.path == "notes.txt"
    assert str(exc_info.value) == "Invalid file format: notes.txt (expected .md or .markdown, got .txt)"

    with pytest.raises(InvalidFileFormat, match="has no extension"):
        validate_file_extension("Makefile", "md")


def test_read_rejects_invalid_utf8(tmp_path):
    source = tmp_path / "latin1.md"
    source.write_bytes("# Caf\xe9".encode("latin-1"))

    with pytest.raises(InvalidFileFormat, match="not valid UTF-8") as exc_info:
        read_file_to_string(source)
    assert exc_info.value.path == str(source)
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


def test_output_path_for(tmp_path):
    assert output_path_for("docs/intro.md", tmp_path) == tmp_path / "intro.pptx"
