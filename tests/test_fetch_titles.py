"""Tests for the fetch_titles example with an in-memory fetcher."""

import asyncio

import pytest

from tiny_barrier.examples.fetch_titles import collect_titles, parse_title


def _page(title: str) -> str:
    return f"<html><head><title> {title} </title></head><body></body></html>"


class FlakyFetcher:
    """Fails the first `failures[url]` calls for a URL, then serves a page."""

    def __init__(self, failures=None) -> None:
        self.failures = dict(failures or {})
        self.calls = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        await asyncio.sleep(0)
        if self.failures.get(url, 0) > 0:
            self.failures[url] -= 1
            raise ConnectionError(f"cannot reach {url}")
        return _page(url.rsplit("/", 1)[-1])


class TestParseTitle:
    def test_title(self):
        assert parse_title(_page("Hello")) == "Hello"

    def test_missing_title(self):
        assert parse_title("<html><body>no title</body></html>") is None


class TestCollectTitles:
    @pytest.mark.asyncio
    async def test_all_urls_fetched(self):
        fetch = FlakyFetcher()
        urls = ["http://x/a", "http://x/b", "http://x/c"]
        titles = await collect_titles(urls, fetch=fetch)
        assert titles == {"http://x/a": "a", "http://x/b": "b", "http://x/c": "c"}

    @pytest.mark.asyncio
    async def test_retries_increment_the_barrier(self):
        fetch = FlakyFetcher({"http://x/b": 2})
        titles = await collect_titles(["http://x/a", "http://x/b"], fetch=fetch, retries=2, backoff_base=0.0)
        assert titles["http://x/b"] == "b"
        assert fetch.calls.count("http://x/b") == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise(self):
        fetch = FlakyFetcher({"http://x/bad": 5})
        with pytest.raises(ConnectionError):
            await collect_titles(["http://x/ok", "http://x/bad"], fetch=fetch, retries=1, backoff_base=0.0)
        assert fetch.calls.count("http://x/bad") == 2

    @pytest.mark.asyncio
    async def test_no_urls(self):
        assert await collect_titles([], fetch=FlakyFetcher()) == {}
