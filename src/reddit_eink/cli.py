import argparse
import asyncio
import sys
from typing import List, Optional

from .config import CONVERTER_ARGS, CONVERTER_TIMEOUT, DEFAULT_POSTS, EBOOK_CONVERT_PATH
from .errors import PipelineError
from .pipeline import PipelineOptions, run_pipeline


LOG_PREFIXES = {"info": "[*]", "success": "[+]", "warning": "[!]", "error": "[x]"}


def log(msg: str, level: str = "info"):
    prefix = LOG_PREFIXES.get(level, "[*]")
    stream = sys.stderr if level == "error" else sys.stdout
    print(f"{prefix} {msg}", file=stream)


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {n}")
    return n


def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {n}")
    return n


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        prog="reddit-eink",
        description=(
            "Read latest posts and comments on your favorite subreddit on an eink device. "
            "Downloads the latest posts with their full comment tree to a markdown document; "
            "if ebook-convert is available an ebook is produced from it."
        ),
    )
    p.add_argument("subreddit", help="Subreddit to retrieve posts from (without /r/).")
    p.add_argument("output", help="Output file; a non-.md extension triggers ebook-convert.")
    p.add_argument("-p", "--posts", type=positive_int, default=DEFAULT_POSTS, help="Number of posts to retrieve.")
    p.add_argument("-e", "--ebook-convert", default=EBOOK_CONVERT_PATH, help="ebook-convert path.")
    p.add_argument("-c", "--converter-args", default=CONVERTER_ARGS, help="Extra arguments for ebook-convert (shell quoting).")
    p.add_argument("--max-depth", type=non_negative_int, default=0, help="Max reply depth to render (0 = full tree).")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output (per-post progress, ebook-convert output).")
    return p.parse_args(argv)


def options_from_args(args) -> PipelineOptions:
    return PipelineOptions(
        subreddit=args.subreddit,
        output=args.output,
        posts=args.posts,
        ebook_convert=args.ebook_convert,
        converter_args=args.converter_args,
        verbose=args.verbose,
        max_depth=args.max_depth or None,
        converter_timeout=CONVERTER_TIMEOUT,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        asyncio.run(run_pipeline(options_from_args(args), log=log))
    except PipelineError as e:
        log(str(e), "error")
        return 1
    log("done", "success")
    return 0


if __name__ == "__main__":
    sys.exit(main())
