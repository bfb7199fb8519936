from typing import Iterable, Optional

from .errors import DataIntegrityError
from .models import Comment, RedditPost, WithdrawnComment


# Reddit escapes the "&#x200B;" users type for empty paragraphs
ZERO_WIDTH_SPACE_ARTIFACT = "&amp;#x200B;"


def quote(text: str) -> str:
    """Mark every line of ``text`` with one more blockquote level."""
    return (">" + text).replace("\n", "\n>")


def render_comment(comment: Comment, depth: int = 0, max_depth: Optional[int] = None) -> str:
    """
    Render one comment and its replies as a single quoted block.

    Each call quotes its own subtree exactly once; a reply ends up one level
    deeper than its parent because it is embedded in the parent's block
    before that block is quoted. ``depth`` is only consulted for the optional
    ``max_depth`` cap: replies of a comment at ``depth >= max_depth`` are left out.
    """
    if isinstance(comment, WithdrawnComment):
        return quote("")

    if comment.body is None:
        raise DataIntegrityError(
            f"comment {comment.id or '?'} by {comment.author} has no body"
        )

    output = "\n\n** " + comment.author + " -- **\n" + comment.body + "\n"
    if max_depth is None or depth < max_depth:
        for reply in comment.replies:
            output += render_comment(reply, depth + 1, max_depth)
    return quote(output)


async def render_post(crawler, subreddit: str, post: RedditPost, max_depth: Optional[int] = None) -> str:
    output = "#" + post.title + "\n" + post.content

    comments = await crawler.fetch_comment_tree(subreddit, post.id)
    for comment in comments:
        output += render_comment(comment, 0, max_depth)
    return output


def document_header(subreddit: str) -> str:
    return f"---\ntitle: /r/{subreddit}\n---\n\n"


def clean_markdown(text: str) -> str:
    return text.replace(ZERO_WIDTH_SPACE_ARTIFACT, "\n")


def assemble_document(subreddit: str, rendered_posts: Iterable[str]) -> str:
    return clean_markdown(document_header(subreddit) + "".join(rendered_posts))
