from typing import Optional


class RedditEinkError(Exception):
    """Base class for every fatal error raised while building a document."""


class RemoteFetchError(RedditEinkError):
    """Listing or comment tree could not be retrieved (network, HTTP status, bad payload)."""

    def __init__(self, message: str, *, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DataIntegrityError(RedditEinkError):
    """An authored comment arrived without body text."""


class OutputWriteError(RedditEinkError):
    """The Markdown document could not be written."""


class ConversionError(RedditEinkError):
    """
    ebook-convert could not run:
    - argument string did not tokenize (raised before anything is spawned)
    - executable missing / not startable
    - timeout or non-zero exit status
    """

    def __init__(
        self,
        message: str,
        *,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class PipelineError(RedditEinkError):
    """Wraps the first failure of a run together with the stage it happened in."""

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
