from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class RedditPost:
    id: str
    title: str
    content: str
    url: str = ""
    author: str = "[deleted]"


@dataclass
class RedditComment:
    author: str
    body: Optional[str]  # None only for malformed payloads; rendering rejects it
    replies: List["Comment"] = field(default_factory=list)
    id: str = ""


@dataclass
class WithdrawnComment:
    """Comment node without an author; renders as an empty quote."""

    id: str = ""


Comment = Union[RedditComment, WithdrawnComment]
