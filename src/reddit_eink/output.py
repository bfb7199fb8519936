from pathlib import Path
from typing import Union

from .config import MARKDOWN_EXTENSION
from .errors import OutputWriteError


def markdown_path_for(output: Union[str, Path]) -> Path:
    try:
        return Path(output).with_suffix(MARKDOWN_EXTENSION)
    except ValueError as e:
        raise OutputWriteError(f"cannot derive a markdown path from {str(output)!r}: {e}") from e


def needs_conversion(output: Union[str, Path]) -> bool:
    return Path(output).suffix != MARKDOWN_EXTENSION


def write_markdown_file(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"cannot write markdown to {path}: {e}") from e
    return path
