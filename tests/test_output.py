from pathlib import Path

import pytest

from reddit_eink.errors import OutputWriteError
from reddit_eink.output import markdown_path_for, needs_conversion, write_markdown_file


def test_markdown_path_forces_md_extension():
    assert markdown_path_for("books/python.epub") == Path("books/python.md")
    assert markdown_path_for("python.md") == Path("python.md")
    assert markdown_path_for("python") == Path("python.md")


def test_needs_conversion():
    assert needs_conversion("a.epub")
    assert needs_conversion("a")
    assert not needs_conversion("a.md")


def test_write_markdown_file_utf8(tmp_path):
    path = tmp_path / "nested" / "doc.md"
    write_markdown_file(path, "café ☃\n")
    assert path.read_bytes() == "café ☃\n".encode("utf-8")


def test_write_markdown_file_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        write_markdown_file(blocker / "doc.md", "text")


@pytest.mark.parametrize("output", [".", "/"])
def test_markdown_path_without_file_name(output):
    with pytest.raises(OutputWriteError):
        markdown_path_for(output)
