import subprocess
from pathlib import Path

import pytest

from reddit_eink import converter
from reddit_eink.errors import ConversionError


class FakeRun:
    def __init__(self, returncode=0, stdout="", stderr="", exc=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.exc = exc
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


def test_split_converter_args_uses_shell_rules():
    args = converter.split_converter_args('--chapter "//h:h1" --smarten-punctuation --markdown-extensions meta')
    assert args == ["--chapter", "//h:h1", "--smarten-punctuation", "--markdown-extensions", "meta"]


def test_split_converter_args_rejects_unbalanced_quotes():
    with pytest.raises(ConversionError):
        converter.split_converter_args('--title "unterminated')


def test_runs_converter_with_positional_paths_first(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(converter.subprocess, "run", fake)

    converter.run_ebook_converter(
        Path("out/book.md"), "out/book.epub", ebook_convert="/opt/ebook-convert", converter_args="-a 'b c'"
    )

    (cmd, kwargs), = fake.calls
    assert cmd == ["/opt/ebook-convert", str(Path("out/book.md")), "out/book.epub", "-a", "b c"]
    assert kwargs["check"] is False
    assert kwargs["timeout"] is None


def test_bad_arguments_never_spawn(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(converter.subprocess, "run", fake)
    with pytest.raises(ConversionError):
        converter.run_ebook_converter(Path("a.md"), "a.epub", ebook_convert="x", converter_args="'oops")
    assert fake.calls == []


def test_non_zero_exit_is_an_error(monkeypatch):
    monkeypatch.setattr(converter.subprocess, "run", FakeRun(returncode=2, stderr="boom"))
    with pytest.raises(ConversionError) as exc:
        converter.run_ebook_converter(Path("a.md"), "a.epub", ebook_convert="x", converter_args="")
    assert exc.value.returncode == 2
    assert exc.value.stderr == "boom"


def test_missing_executable_is_an_error(monkeypatch):
    monkeypatch.setattr(converter.subprocess, "run", FakeRun(exc=FileNotFoundError("no such file")))
    with pytest.raises(ConversionError):
        converter.run_ebook_converter(Path("a.md"), "a.epub", ebook_convert="missing", converter_args="")


def test_timeout_is_an_error(monkeypatch):
    monkeypatch.setattr(converter.subprocess, "run", FakeRun(exc=subprocess.TimeoutExpired("x", 5)))
    with pytest.raises(ConversionError):
        converter.run_ebook_converter(Path("a.md"), "a.epub", ebook_convert="x", converter_args="", timeout=5)


def test_verbose_logs_output_even_on_failure(monkeypatch):
    monkeypatch.setattr(converter.subprocess, "run", FakeRun(returncode=1, stdout="out", stderr="err"))
    messages = []
    with pytest.raises(ConversionError):
        converter.run_ebook_converter(
            Path("a.md"),
            "a.epub",
            ebook_convert="x",
            converter_args="",
            verbose=True,
            log=lambda msg, lvl="info": messages.append(msg),
        )
    assert messages == ["ebook-convert status: 1", "out", "err"]
