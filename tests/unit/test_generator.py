#!/usr/bin/env python3
"""
Test merge, single-file and separate-file conversion plus the CLI.
"""
import logging
from pathlib import Path

import pytest
from pptx import Presentation

from md2pptx.errors import ConversionError, FileNotFound, InvalidFileFormat, ParsingError
from md2pptx.generator import (
    SlideGenerator,
    Verbosity,
    convert_files_separately,
    convert_markdown_to_pptx,
    convert_separate_files,
    convert_single_markdown_file,
    main,
    merge_documents,
    parse_and_combine_markdown_files,
)
from md2pptx.markdown_parser import parse_markdown
from md2pptx.models import Paragraph


def _titles(document):
    return [slide.title for slide in document.slides]


def test_merge_preserves_file_and_slide_order(deck_dir):
    combined = parse_and_combine_markdown_files([deck_dir / "a.md", deck_dir / "b.md"])

    assert _titles(combined) == ["A1", "A2", "b", "B1"]


def test_merge_slide_count_is_sum_of_parts():
    sources = [
        (Path("one.md"), parse_markdown("# 1\n\n# 2")),
        (Path("two.md"), parse_markdown("## 3")),
        (Path("three.md"), parse_markdown("# 4\n\n## 5\n\n## 6")),
    ]

    combined = merge_documents(sources)

    assert _titles(combined) == ["1", "2", "3", "4", "5", "6"]


def test_untitled_slide_gets_file_stem():
    document = parse_markdown("just text")

    combined = merge_documents([(Path("/notes/intro.md"), document)])

    assert combined.slides[0].title == "intro"
    assert combined.slides[0].content == [Paragraph("just text")]


def test_metadata_from_first_document_with_title(deck_dir):
    combined = parse_and_combine_markdown_files([deck_dir / "b.md", deck_dir / "a.md"])

    # b.md has an H1 too, so it wins by coming first.
    assert combined.metadata.title == "B1"


def test_metadata_falls_back_to_directory_name(tmp_path):
    source = tmp_path / "quarterly"
    source.mkdir()
    (source / "x.md").write_text("## Only H2", encoding="utf-8")

    combined = parse_and_combine_markdown_files([source / "x.md"])

    assert combined.metadata.title == "quarterly Presentation"


def test_merge_aborts_on_first_parse_failure(deck_dir):
    (deck_dir / "empty.md").write_text("", encoding="utf-8")

    with pytest.raises(ConversionError, match="Failed to parse"):
        parse_and_combine_markdown_files([deck_dir / "a.md", deck_dir / "empty.md"])


def test_merge_of_nothing_raises():
    with pytest.raises(ConversionError, match="No slides found"):
        merge_documents([])


def test_convert_directory_to_single_deck(deck_dir, tmp_path):
    output = tmp_path / "out" / "deck.pptx"

    convert_markdown_to_pptx(deck_dir, output)

    prs = Presentation(str(output))
    assert [s.shapes[0].text for s in prs.slides] == ["A1", "A2", "b", "B1"]
    assert prs.core_properties.title == "A1"


def test_convert_single_file(deck_dir, tmp_path):
    output = tmp_path / "single.pptx"

    result = convert_single_markdown_file(deck_dir / "a.md", output, "minimal")

    assert result == output
    assert len(Presentation(str(output)).slides) == 2


def test_convert_single_file_missing(tmp_path):
    with pytest.raises(FileNotFound):
        convert_single_markdown_file(tmp_path / "nope.md", tmp_path / "out.pptx")


def test_convert_single_file_wrong_extension(tmp_path):
    source = tmp_path / "notes.txt"
    source.write_text("# T", encoding="utf-8")

    with pytest.raises(InvalidFileFormat):
        convert_single_markdown_file(source, tmp_path / "out.pptx")


def test_convert_single_file_without_slides(tmp_path):
    source = tmp_path / "blank.markdown"
    source.write_text("\n\n", encoding="utf-8")

    with pytest.raises(ParsingError):
        convert_single_markdown_file(source, tmp_path / "out.pptx")


def test_separate_mode_isolates_failures(deck_dir, tmp_path, caplog):
    (deck_dir / "c_empty.md").write_text("", encoding="utf-8")
    output_dir = tmp_path / "decks"

    with caplog.at_level(logging.ERROR):
        count = convert_separate_files(deck_dir, output_dir)

    assert count == 2
    assert sorted(p.name for p in output_dir.iterdir()) == ["a.pptx", "b.pptx"]
    assert "c_empty.md" in caplog.text


def test_separate_mode_fails_when_nothing_converts(tmp_path):
    sources = []
    for name in ("x.md", "y.md"):
        path = tmp_path / name
        path.write_text("", encoding="utf-8")
        sources.append(path)

    with pytest.raises(ConversionError, match="No files were successfully processed"):
        convert_files_separately(sources, tmp_path / "out")


def test_separate_mode_skips_undecodable_file(tmp_path, caplog):
    source = tmp_path / "src"
    source.mkdir()
    (source / "a.md").write_text("# A", encoding="utf-8")
    (source / "b.md").write_bytes(b"# B\n\n\xff\xfe bad")
    (source / "c.md").write_text("# C", encoding="utf-8")
    output_dir = tmp_path / "out"

    with caplog.at_level(logging.ERROR):
        count = convert_separate_files(source, output_dir)

    assert count == 2
    assert sorted(p.name for p in output_dir.iterdir()) == ["a.pptx", "c.pptx"]
    assert "not valid UTF-8" in caplog.text


def test_cli_merge_reports_undecodable_file(tmp_path, capsys):
    source = tmp_path / "src"
    source.mkdir()
    (source / "a.md").write_bytes(b"\xff# A")

    with pytest.raises(SystemExit) as exc_info:
        main([str(source), str(tmp_path / "out.pptx"), "-q"])

    assert exc_info.value.code == 1
    assert "Error: Invalid file format" in capsys.readouterr().err


def test_slide_generator_generate(tmp_path):
    generator = SlideGenerator(template="modern")
    output = generator.generate("# Test Slide\n\n- Item 1\n- Item 2", tmp_path / "demo.pptx")

    prs = Presentation(str(output))
    assert len(prs.slides) == 1
    assert prs.slides[0].shapes[1].text == "Item 1\nItem 2"


def test_verbosity_levels():
    assert Verbosity.QUIET.log_level == logging.WARNING
    assert Verbosity.NORMAL.log_level == logging.INFO
    assert Verbosity.VERBOSE.log_level == logging.DEBUG


def test_cli_merge(deck_dir, tmp_path):
    output = tmp_path / "cli.pptx"

    assert main([str(deck_dir), str(output), "-q"]) == 0
    assert len(Presentation(str(output)).slides) == 4


def test_cli_separate_partial_success(deck_dir, tmp_path):
    (deck_dir / "broken.md").write_text("", encoding="utf-8")
    output_dir = tmp_path / "many"

    assert main([str(deck_dir), str(output_dir), "--separate", "-q"]) == 0
    assert sorted(p.name for p in output_dir.iterdir()) == ["a.pptx", "b.pptx"]


def test_cli_rejects_non_pptx_output(deck_dir, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(deck_dir), str(tmp_path / "out.pdf"), "-q"])

    assert exc_info.value.code == 1
    assert "Output file must have .pptx extension" in capsys.readouterr().err


def test_cli_missing_input(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing"), str(tmp_path / "out.pptx")])

    assert exc_info.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_cli_reports_conversion_error(tmp_path, capsys):
    source = tmp_path / "src"
    source.mkdir()
    (source / "empty.md").write_text("", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main([str(source), str(tmp_path / "out.pptx"), "-q"])

    assert exc_info.value.code == 1
    assert "Failed to parse" in capsys.readouterr().err
