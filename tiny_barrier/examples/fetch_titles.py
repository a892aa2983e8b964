"""
Example: fetch page titles concurrently and converge on a Barrier.
Behavior:
  - every URL increments the barrier, every finished fetch calls barrier.done
  - failed fetches are retried with backoff by incrementing the barrier again
  - a fetch that keeps failing is reported with done(err) and fails the run
"""
import argparse
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Set

import aiohttp
from bs4 import BeautifulSoup  # type: ignore

from tiny_barrier import Barrier, BarrierProgress, setup_logging
from tiny_barrier.utils.backoff import sleep_backoff

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[str]]


def parse_title(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    return soup.title.get_text(strip=True) if soup.title else None


async def collect_titles(
    urls: List[str],
    fetch: Optional[Fetcher] = None,
    retries: int = 2,
    concurrency: int = 8,
    timeout: float = 15.0,
    backoff_base: float = 0.5,
    show_progress: bool = False,
) -> Dict[str, Optional[str]]:
    """
    Fetch every URL and return {url: title}.
    Raises the first error once a URL has failed retries + 1 times.
    """
    if not urls:
        logger.warning("No URLs provided.")
        return {}

    titles: Dict[str, Optional[str]] = {}
    tasks: Set[asyncio.Task] = set()
    semaphore = asyncio.Semaphore(concurrency)
    session: Optional[aiohttp.ClientSession] = None
    if fetch is None:
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))

        async def fetch(url: str) -> str:
            async with session.get(url) as resp:
                resp.raise_for_status()
                return await resp.text(errors="replace")

    progress = BarrierProgress(desc="titles", disable=not show_progress)
    barrier = Barrier(on_add=progress.add_total, on_done=progress.tick)
    barrier.on_error(lambda err, url=None: logger.error("Fetch failed (%s): %s", url, err))
    barrier.on_success(lambda: logger.info("Fetched %d titles", len(titles)))

    async def fetch_title(url: str, attempt: int) -> None:
        if attempt:
            await sleep_backoff(attempt - 1, base=backoff_base)
        async with semaphore:
            html = await fetch(url)
        titles[url] = parse_title(html)

    def start(url: str, attempt: int) -> None:
        task = asyncio.create_task(fetch_title(url, attempt))
        tasks.add(task)
        task.add_done_callback(lambda t: finished(url, attempt, t))

    def finished(url: str, attempt: int, task: asyncio.Task) -> None:
        tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            barrier.done()
            return
        if attempt < retries:
            logger.warning("Fetch error (%s): %s (attempt %d/%d)", url, exc, attempt + 1, retries + 1)
            barrier.increment()
            start(url, attempt + 1)
            barrier.done()
            return
        barrier.done(exc, url)

    for url in urls:
        barrier.increment()
        start(url, 0)

    try:
        await barrier.wait()
    finally:
        for task in list(tasks):
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if session is not None:
            await session.close()
        progress.close()
    return titles


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch page titles concurrently.")
    parser.add_argument("urls", nargs="+")
    parser.add_argument("--retries", type=int, default=2)
    parser.add_argument("--concurrency", type=int, default=8)
    parser.add_argument("--timeout", type=float, default=15.0)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)
    titles = asyncio.run(
        collect_titles(
            args.urls,
            retries=args.retries,
            concurrency=args.concurrency,
            timeout=args.timeout,
            show_progress=True,
        )
    )
    for url, title in titles.items():
        print(f"{url}\t{title or ''}")


if __name__ == "__main__":
    main()
