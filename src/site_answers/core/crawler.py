from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace

import aiohttp
from aiolimiter import AsyncLimiter
from yarl import URL

from site_answers.core.config import CrawlSettings
from site_answers.core.errors import FetchError
from site_answers.core.models import Document
from site_answers.core.parser import SoupPage, extract_document
from site_answers.core.robots import RobotsPolicy, fetch_robots
from site_answers.core.utils import is_same_origin, normalize_url

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


@dataclass
class CrawlStats:
    queued: int = 0
    fetched: int = 0
    indexed: int = 0
    skipped_non_html: int = 0
    skipped_redirect: int = 0
    failed: int = 0


@dataclass(frozen=True)
class CrawlResult:
    documents: list[Document]
    stats: CrawlStats


def is_html(content_type: str) -> bool:
    return "text/html" in (content_type or "").lower()


class Crawler:
    """Single-origin crawler: a bounded pool of workers draining one shared frontier."""

    def __init__(self, *, settings: CrawlSettings, session: aiohttp.ClientSession) -> None:
        self._settings = settings
        self._session = session
        self._origin = settings.origin.rstrip("/")
        # One token per fetch start; at most `concurrency` starts per interval.
        self._limiter = AsyncLimiter(
            max_rate=max(1, settings.concurrency),
            time_period=max(0.01, float(settings.rate_interval_seconds)),
        )
        self._robots: RobotsPolicy | None = None
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._seen: set[str] = set()
        self._results: list[Document] = []
        self._stats = CrawlStats()

    def _allowed(self, url: str) -> bool:
        if self._robots is None:
            return True
        return self._robots.can_fetch(self._settings.user_agent, url)

    def _admit(self, url: str) -> bool:
        # No awaits in here: admission runs atomically on the event loop, so two workers
        # discovering the same link cannot both enqueue it.
        n = normalize_url(url)
        if not n or n in self._seen:
            return False
        if not is_same_origin(n, self._origin):
            return False
        if not self._allowed(n):
            logger.debug("Disallowed by robots.txt: %s", n)
            return False
        self._seen.add(n)
        if len(self._seen) > self._settings.max_pages:
            return False
        self._queue.put_nowait(n)
        self._stats.queued += 1
        return True

    def _redirect_allowed(self, source: str, target: str) -> bool:
        if not is_same_origin(target, self._origin):
            logger.info("Redirect leaves origin; skipping: %s -> %s", source, target)
            return False
        if not self._allowed(target):
            logger.info("Redirect into a robots.txt-disallowed path; skipping: %s -> %s", source, target)
            return False
        return True

    async def _fetch(self, url: str) -> tuple[str, str] | None:
        """Return (final_url, html), or None when the page is skipped.

        Redirects are followed one hop at a time so each target passes the origin and
        robots.txt checks before it is requested.
        """

        headers = {
            "User-Agent": self._settings.user_agent,
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        }
        current = url
        for _hop in range(self._settings.max_redirects + 1):
            async with self._limiter:
                async with self._session.get(
                    current,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self._settings.timeout_seconds),
                    allow_redirects=False,
                ) as resp:
                    status = int(resp.status)
                    if status in REDIRECT_STATUSES:
                        location = resp.headers.get("Location", "")
                        if not location:
                            raise FetchError(current, f"HTTP {status} without Location")
                        target = str(resp.url.join(URL(location)).with_fragment(None))
                    elif status < 200 or status >= 400:
                        raise FetchError(current, f"HTTP {status}")
                    else:
                        self._stats.fetched += 1
                        # Never read non-HTML bodies: PDFs and other binaries must not reach the index.
                        if not is_html(resp.headers.get("Content-Type", "")):
                            self._stats.skipped_non_html += 1
                            logger.debug("Skipping non-HTML response: %s", current)
                            return None
                        return str(resp.url), await resp.text(errors="ignore")
            if not self._redirect_allowed(current, target):
                self._stats.skipped_redirect += 1
                return None
            current = target
        raise FetchError(url, f"more than {self._settings.max_redirects} redirects")

    async def process_page(self, url: str) -> Document | None:
        fetched = await self._fetch(url)
        if fetched is None:
            return None
        final_url, html = fetched

        page = SoupPage(html)
        doc = extract_document(url, page, doc_id=len(self._results))
        self._results.append(doc)
        self._stats.indexed += 1

        for href in page.links():
            candidate = normalize_url(href, base=final_url)
            if is_same_origin(candidate, self._origin):
                self._admit(candidate)
        return doc

    async def _worker(self) -> None:
        while True:
            url = await self._queue.get()
            try:
                await self.process_page(url)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._stats.failed += 1
                logger.warning("Crawl page failed: %s (%s)", url, e)
            finally:
                self._queue.task_done()

    async def crawl(self, seed_urls: list[str]) -> CrawlResult:
        self._robots = await fetch_robots(
            self._session,
            self._origin,
            self._settings.user_agent,
            timeout_seconds=self._settings.timeout_seconds,
        )
        for seed in seed_urls:
            self._admit(seed)
        if self._queue.empty():
            logger.warning("No usable seed URLs for origin %s", self._origin)

        workers = [asyncio.create_task(self._worker()) for _ in range(max(1, self._settings.concurrency))]
        try:
            # Drained and idle: every admitted URL has been taken and marked done.
            await self._queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        docs = [replace(d, id=i) for i, d in enumerate(self._results)]
        s = self._stats
        logger.info(
            "Crawl finished: queued=%s fetched=%s indexed=%s non_html=%s redirect_skips=%s failed=%s",
            s.queued,
            s.fetched,
            s.indexed,
            s.skipped_non_html,
            s.skipped_redirect,
            s.failed,
        )
        return CrawlResult(documents=docs, stats=s)


async def crawl_site(settings: CrawlSettings, seed_urls: list[str]) -> CrawlResult:
    connector = aiohttp.TCPConnector(limit=max(1, settings.concurrency))
    async with aiohttp.ClientSession(connector=connector) as session:
        crawler = Crawler(settings=settings, session=session)
        return await crawler.crawl(seed_urls)
