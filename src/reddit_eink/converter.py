import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from .errors import ConversionError


def split_converter_args(converter_args: str) -> List[str]:
    try:
        return shlex.split(converter_args)
    except ValueError as e:
        raise ConversionError(f"cannot parse converter arguments {converter_args!r}: {e}") from e


def build_converter_command(
    ebook_convert: str,
    md_path: Path,
    output: Union[str, Path],
    extra_args: List[str],
) -> List[str]:
    return [ebook_convert, str(md_path), str(output), *extra_args]


def run_ebook_converter(
    md_path: Path,
    output: Union[str, Path],
    *,
    ebook_convert: str,
    converter_args: str,
    verbose: bool = False,
    timeout: Optional[float] = None,
    log=None,
) -> subprocess.CompletedProcess:
    """
    Run ``ebook-convert <md_path> <output> <extra args...>``.

    The argument string is tokenized before anything is spawned. With
    ``verbose`` the exit status and both output streams are logged whatever
    the outcome.
    """
    log = log or (lambda msg, lvl="info": None)
    cmd = build_converter_command(ebook_convert, md_path, output, split_converter_args(converter_args))

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False, timeout=timeout or None)
    except subprocess.TimeoutExpired as e:
        raise ConversionError(f"{ebook_convert} timed out after {e.timeout}s") from e
    except OSError as e:
        raise ConversionError(f"cannot run {ebook_convert}: {e}") from e

    if verbose:
        log(f"ebook-convert status: {proc.returncode}")
        log(proc.stdout or "")
        log(proc.stderr or "")

    if proc.returncode != 0:
        raise ConversionError(
            f"{ebook_convert} exited with status {proc.returncode}",
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
    return proc
