from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from site_answers.core.composer import compose_answer
from site_answers.core.config import AppConfig, CrawlSettings
from site_answers.core.crawler import CrawlResult, crawl_site
from site_answers.core.errors import IndexNotReadyError, IngestError, SnapshotFormatError
from site_answers.core.intents import analyze_question
from site_answers.core.models import ChatAnswer, FallbackContact, HealthStatus
from site_answers.core.retrieval import Retriever
from site_answers.core.search_index import IndexSnapshot
from site_answers.core.store import DocumentStore, load_seed_list

logger = logging.getLogger(__name__)

CrawlFn = Callable[[CrawlSettings, list[str]], Awaitable[CrawlResult]]


class AnswerService:
    """Operations exposed to the outer HTTP/CLI layer: ingest, health, chat, dump."""

    def __init__(self, *, config: AppConfig, store: DocumentStore, crawl: CrawlFn = crawl_site) -> None:
        self._config = config
        self._store = store
        self._crawl = crawl
        self._snapshot: IndexSnapshot | None = None
        self._snapshot_error: str | None = None
        self._ingest_lock = asyncio.Lock()

    @property
    def fallback(self) -> FallbackContact:
        a = self._config.answer
        return FallbackContact(phone=a.fallback_phone, email=a.contact_email)

    def current_snapshot(self) -> IndexSnapshot | None:
        return self._snapshot

    def load(self) -> bool:
        try:
            docs = self._store.load()
        except SnapshotFormatError as e:
            logger.error("%s; starting with an empty index until ingest runs", e)
            self._snapshot_error = str(e)
            return False
        if not docs:
            logger.info("No index file yet; run ingest to crawl and build the index")
            return False
        self._snapshot = IndexSnapshot.build(docs)
        self._snapshot_error = None
        return True

    async def ingest(self) -> int:
        if self._ingest_lock.locked():
            raise IngestError("An ingest is already running")
        async with self._ingest_lock:
            crawl = self._config.crawl
            try:
                seeds = load_seed_list(self._config.paths.seeds_path, fallback=crawl.origin + "/")
                logger.info("Starting crawl of %s from %s seed(s)", crawl.origin, len(seeds))
                result = await self._crawl(crawl, seeds)
            except Exception as e:
                logger.exception("Ingest failed")
                raise IngestError(f"Crawl failed: {e}") from e

            if not result.documents:
                raise IngestError("Crawl produced no documents; keeping the previous index")

            snapshot = IndexSnapshot.build(result.documents)
            try:
                self._store.save(snapshot.documents)
            except (OSError, TypeError, ValueError) as e:
                logger.exception("Saving the new snapshot failed")
                raise IngestError(f"Could not persist snapshot: {e}") from e
            # Single reference swap: readers see the old snapshot or the new one, never a mix.
            self._snapshot = snapshot
            self._snapshot_error = None
            return len(snapshot)

    def health(self) -> HealthStatus:
        snap = self._snapshot
        return HealthStatus(
            indexed=snap is not None,
            pages=len(snap) if snap is not None else 0,
            snapshot_error=self._snapshot_error,
        )

    def chat(self, question: str) -> ChatAnswer:
        snap = self._snapshot
        if snap is None:
            raise IndexNotReadyError()

        answer_cfg = self._config.answer
        q = analyze_question(question, cross_topic=answer_cfg.cross_topic_expansion)
        if not q.text:
            return ChatAnswer(intent=None, answer_text="", fallback=self.fallback)

        retrieval = Retriever(snap).retrieve(q)
        if not retrieval.hits:
            return ChatAnswer(intent=q.intent, answer_text="", fallback=self.fallback)

        text, sources = compose_answer(
            q,
            retrieval.hits,
            snap,
            max_sources=answer_cfg.max_sources,
            max_sentences=answer_cfg.max_sentences,
            default_terms=answer_cfg.default_snippet_terms,
        )
        return ChatAnswer(intent=q.intent, answer_text=text, sources=sources, fallback=self.fallback)

    def dump(self) -> list[dict[str, Any]]:
        snap = self._snapshot
        if snap is None:
            return []
        return [d.to_dict() for d in snap.documents]
