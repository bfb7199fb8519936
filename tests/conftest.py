import asyncio

import httpx
import pytest

from reddit_eink.reddit_crawler import RedditCrawler


def listing(children, after=None):
    return {"kind": "Listing", "data": {"children": children, "after": after}}


def t3(pid, title="", selftext="", author="poster"):
    return {
        "kind": "t3",
        "data": {
            "id": pid,
            "title": title,
            "selftext": selftext,
            "author": author,
            "permalink": f"/r/test/comments/{pid}/x/",
        },
    }


def t1(cid, author, body, replies=""):
    data = {"id": cid, "body": body, "replies": replies}
    if author is not None:
        data["author"] = author
    return {"kind": "t1", "data": data}


def comments_payload(post, comments):
    return [listing([post]), listing(comments)]


def make_crawler(routes, calls=None):
    """
    ``routes`` maps a URL path to a JSON payload, an ``httpx.Response`` or a
    callable taking the request. Unknown paths answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": 404})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    return RedditCrawler(
        base_url="https://reddit.test",
        min_interval=0,
        retries=2,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def no_sleep(monkeypatch):
    async def _sleep(_seconds):
        return None

    monkeypatch.setattr("reddit_eink.reddit_crawler.asyncio.sleep", _sleep)


def run(coro):
    return asyncio.run(coro)
