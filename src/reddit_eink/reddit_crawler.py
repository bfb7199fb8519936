import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx

from .config import (
    MIN_REQUEST_INTERVAL,
    REDDIT_BASE_URL,
    REDDIT_LISTING_LIMIT,
    REDDIT_USER_AGENT,
    REQUEST_RETRIES,
    REQUEST_TIMEOUT,
)
from .errors import RemoteFetchError
from .models import Comment, RedditComment, RedditPost, WithdrawnComment


class RedditCrawler:
    """
    Read a subreddit via public JSON endpoints (non-official):
    - Latest:   /r/<subreddit>/new.json
    - Comments: /r/<subreddit>/comments/<post_id>.json
    """

    def __init__(
        self,
        log_callback=None,
        *,
        base_url: str = REDDIT_BASE_URL,
        min_interval: float = MIN_REQUEST_INTERVAL,
        timeout: float = REQUEST_TIMEOUT,
        retries: int = REQUEST_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._log = log_callback or (lambda msg, lvl="info": None)
        self._base_url = base_url.rstrip("/")
        self._retries = max(1, int(retries))
        self.client = httpx.AsyncClient(
            headers={
                "User-Agent": REDDIT_USER_AGENT,
                "Accept": "application/json",
                "Accept-Language": "en-US,en;q=0.9",
            },
            timeout=timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=2, max_keepalive_connections=1),
            transport=transport,
        )

        self._rate_lock = asyncio.Lock()
        self._last_request_time = 0.0
        self._min_interval = float(min_interval)

    async def __aenter__(self) -> "RedditCrawler":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self):
        await self.client.aclose()

    async def _rate_limit(self):
        async with self._rate_lock:
            now = time.time()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.time()

    async def _fetch_json(self, url: str, params: Optional[dict] = None) -> Any:
        last_error = "no attempt made"
        for attempt in range(self._retries):
            await self._rate_limit()
            try:
                resp = await self.client.get(url, params=params)
            except httpx.TimeoutException as e:
                last_error = f"timed out: {e}"
                self._log(f"timeout on {url[:120]} (attempt {attempt + 1}/{self._retries})", "warning")
                await asyncio.sleep(3)
                continue
            except httpx.HTTPError as e:
                raise RemoteFetchError(f"request error: {e}", url=url) from e

            if resp.status_code == 429:
                last_error = "rate limited (429)"
                wait = 10 * (attempt + 1)
                self._log(f"rate limited, sleep {wait}s then retry", "warning")
                await asyncio.sleep(wait)
                continue
            if resp.status_code >= 400:
                raise RemoteFetchError(
                    f"http {resp.status_code}: {url[:120]}",
                    url=url,
                    status_code=resp.status_code,
                )
            try:
                return resp.json()
            except ValueError as e:
                raise RemoteFetchError(f"response is not JSON: {url[:120]}", url=url) from e

        raise RemoteFetchError(
            f"giving up after {self._retries} attempts ({last_error}): {url[:120]}",
            url=url,
            status_code=429 if "429" in last_error else None,
        )

    # ---------------------------
    # Posts
    # ---------------------------

    async def list_latest_posts(self, subreddit: str, count: int) -> List[RedditPost]:
        if count <= 0:
            raise ValueError(f"post count must be positive, got {count}")

        url = f"{self._base_url}/r/{subreddit}/new.json"
        posts: List[RedditPost] = []
        after: Optional[str] = None
        pages = 0

        self._log(f"listing latest {count} posts of /r/{subreddit}")
        while len(posts) < count:
            params: Dict[str, Any] = {"limit": min(REDDIT_LISTING_LIMIT, count - len(posts))}
            if after:
                params["after"] = after

            data = await self._fetch_json(url, params=params)
            listing = _listing_data(data, url)
            pages += 1

            children = _listing_children(listing, url)
            for child in children:
                if not isinstance(child, dict):
                    raise RemoteFetchError(f"unexpected listing child: {child!r:.80}", url=url)
                if child.get("kind") != "t3":
                    continue
                pd = child.get("data")
                if not isinstance(pd, dict):
                    raise RemoteFetchError(f"post without data in listing: {url[:120]}", url=url)
                pid = str(pd.get("id", "") or "")
                if not pid:
                    raise RemoteFetchError(f"post without id in listing: {url[:120]}", url=url)
                title = pd.get("title", "") or ""
                content = pd.get("selftext", "") or ""
                if not isinstance(title, str) or not isinstance(content, str):
                    raise RemoteFetchError(f"post {pid} has non-text title or selftext", url=url)
                permalink = pd.get("permalink", "") or ""
                posts.append(
                    RedditPost(
                        id=pid,
                        title=title,
                        content=content,
                        url=f"{self._base_url}{permalink}" if permalink else f"{self._base_url}/comments/{pid}",
                        author=str(pd.get("author", "[deleted]") or "[deleted]"),
                    )
                )
                if len(posts) >= count:
                    break

            self._log(f"page {pages}: results={len(children)} total_posts={len(posts)}")
            after = listing.get("after")
            if not children or not after:
                break

        return posts

    # ---------------------------
    # Comments
    # ---------------------------

    async def fetch_comment_tree(self, subreddit: str, post_id: str) -> List[Comment]:
        url = f"{self._base_url}/r/{subreddit}/comments/{post_id}.json"
        data = await self._fetch_json(url)
        if not isinstance(data, list) or len(data) < 2:
            raise RemoteFetchError(f"unexpected comments payload for post {post_id}", url=url)

        try:
            listing = _listing_data(data[1], url)
            return parse_comment_listing(_listing_children(listing, url))
        except RemoteFetchError as e:
            if not e.url:
                e.url = url
            raise


def parse_comment_listing(children: list) -> List[Comment]:
    """Turn the ``children`` of a comment listing into the comment forest, keeping API order."""
    out: List[Comment] = []
    for child in children:
        if not isinstance(child, dict):
            raise RemoteFetchError(f"unexpected listing child: {child!r:.80}")
        kind = child.get("kind")
        if kind == "more":
            # "load more comments" stub, not part of the fetched tree
            continue
        if kind != "t1":
            continue
        out.append(parse_comment(child.get("data")))
    return out


def parse_comment(cd: Any) -> Comment:
    if not isinstance(cd, dict):
        raise RemoteFetchError(f"comment without data: {cd!r:.80}")
    cid = str(cd.get("id", "") or "")
    author = cd.get("author")
    if author is None:
        return WithdrawnComment(id=cid)
    if not isinstance(author, str):
        raise RemoteFetchError(f"comment {cid or '?'} has a non-text author: {author!r:.40}")

    body = cd.get("body")
    if body is not None and not isinstance(body, str):
        raise RemoteFetchError(f"comment {cid or '?'} has a non-text body: {body!r:.40}")

    replies_data = cd.get("replies")
    replies: List[Comment] = []
    # Reddit sends "" instead of a listing when there are no replies
    if replies_data and not isinstance(replies_data, str):
        where = f"replies of comment {cid or '?'}"
        replies = parse_comment_listing(_listing_children(_listing_data(replies_data, where), where))

    return RedditComment(author=author, body=body, replies=replies, id=cid)


def _listing_data(payload: Any, where: str) -> Dict[str, Any]:
    if not isinstance(payload, dict) or payload.get("kind") != "Listing":
        raise RemoteFetchError(f"expected a Listing: {where[:120]}")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise RemoteFetchError(f"Listing without data: {where[:120]}")
    return data


def _listing_children(listing: Dict[str, Any], where: str) -> list:
    children = listing.get("children") or []
    if not isinstance(children, list):
        raise RemoteFetchError(f"Listing children is not a list: {where[:120]}")
    return children
