import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import CONVERTER_ARGS, CONVERTER_TIMEOUT, DEFAULT_POSTS, EBOOK_CONVERT_PATH
from .converter import run_ebook_converter
from .errors import (
    ConversionError,
    DataIntegrityError,
    OutputWriteError,
    PipelineError,
    RemoteFetchError,
)
from .output import markdown_path_for, needs_conversion, write_markdown_file
from .reddit_crawler import RedditCrawler
from .render import assemble_document, render_post


STAGE_FETCH_POSTS = "fetch posts"
STAGE_FETCH_COMMENTS = "fetch comments"
STAGE_RENDER = "render"
STAGE_WRITE = "write"
STAGE_CONVERT = "convert"


@dataclass
class PipelineOptions:
    subreddit: str
    output: str
    posts: int = DEFAULT_POSTS
    ebook_convert: str = EBOOK_CONVERT_PATH
    converter_args: str = CONVERTER_ARGS
    verbose: bool = False
    max_depth: Optional[int] = None
    converter_timeout: float = CONVERTER_TIMEOUT


@dataclass
class PipelineResult:
    markdown_path: Path
    output_path: Path
    post_count: int
    converted: bool


async def build_document(options: PipelineOptions, crawler, log) -> Tuple[str, int]:
    """Fetch the latest posts and render them strictly one after the other."""
    try:
        latest = await crawler.list_latest_posts(options.subreddit, options.posts)
    except RemoteFetchError as e:
        raise PipelineError(STAGE_FETCH_POSTS, e) from e
    log(f"fetched {len(latest)} posts from /r/{options.subreddit}", "success")

    rendered: List[str] = []
    for i, post in enumerate(latest):
        if options.verbose:
            log(f"post [{i + 1}/{len(latest)}] {post.title[:60]} by {post.author} ({post.url or post.id})")
        try:
            rendered.append(
                await render_post(crawler, options.subreddit, post, max_depth=options.max_depth)
            )
        except RemoteFetchError as e:
            raise PipelineError(STAGE_FETCH_COMMENTS, e) from e
        except DataIntegrityError as e:
            raise PipelineError(STAGE_RENDER, e) from e

    return assemble_document(options.subreddit, rendered), len(latest)


async def run_pipeline(options: PipelineOptions, crawler=None, log=None) -> PipelineResult:
    """
    fetch posts -> render (sequential) -> assemble -> write .md -> convert (unless output is .md)

    Nothing is written unless every post rendered. The first failure is raised
    as a PipelineError naming its stage. A crawler passed in stays open; one
    created here is closed before returning.
    """
    log = log or (lambda msg, lvl="info": None)
    if options.posts <= 0:
        raise ValueError(f"post count must be positive, got {options.posts}")

    output_path = Path(options.output)
    try:
        md_path = markdown_path_for(output_path)
    except OutputWriteError as e:
        raise PipelineError(STAGE_WRITE, e) from e

    owns_crawler = crawler is None
    if owns_crawler:
        crawler = RedditCrawler(log_callback=log)

    try:
        document, post_count = await build_document(options, crawler, log)
    finally:
        if owns_crawler:
            await crawler.close()

    try:
        write_markdown_file(md_path, document)
    except OutputWriteError as e:
        raise PipelineError(STAGE_WRITE, e) from e
    log(f"markdown: {md_path}", "success")

    converted = False
    if needs_conversion(output_path):
        log(f"converting to {output_path} with {options.ebook_convert}")
        try:
            await asyncio.to_thread(
                run_ebook_converter,
                md_path,
                output_path,
                ebook_convert=options.ebook_convert,
                converter_args=options.converter_args,
                verbose=options.verbose,
                timeout=options.converter_timeout,
                log=log,
            )
        except ConversionError as e:
            raise PipelineError(STAGE_CONVERT, e) from e
        converted = True
        log(f"ebook: {output_path}", "success")

    return PipelineResult(
        markdown_path=md_path,
        output_path=output_path,
        post_count=post_count,
        converted=converted,
    )
