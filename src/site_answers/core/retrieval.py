from __future__ import annotations

import logging
from dataclasses import dataclass, field

from site_answers.core.intents import AnalyzedQuestion
from site_answers.core.search_index import IndexSnapshot, SearchHit, SearchOptions

logger = logging.getLogger(__name__)


RETRIEVAL_BOOST = {"title": 8.0, "section": 3.0, "text": 1.0}
LITERAL_STAGE = "literal"


@dataclass(frozen=True)
class Stage:
    name: str
    use_expanded: bool
    options: SearchOptions


CASCADE: tuple[Stage, ...] = (
    Stage("strict", True, SearchOptions(fuzzy=0.25, prefix=True, combine_with="AND", boost=RETRIEVAL_BOOST)),
    Stage("forgiving", True, SearchOptions(fuzzy=0.4, prefix=True, combine_with="OR", boost=RETRIEVAL_BOOST)),
    Stage("raw", False, SearchOptions(fuzzy=0.5, prefix=True, combine_with="OR", boost=RETRIEVAL_BOOST)),
)


@dataclass(frozen=True)
class Retrieval:
    stage: str | None
    hits: list[SearchHit] = field(default_factory=list)


def literal_fallback(snapshot: IndexSnapshot, terms: tuple[str, ...]) -> list[SearchHit]:
    """Single best document by literal key-term hits in title + section."""

    if not terms:
        return []
    best: SearchHit | None = None
    for doc in snapshot.documents:
        hay = f"{doc.title or ''} {doc.section or ''}".lower()
        found = tuple(t for t in terms if t in hay)
        # Strictly greater: the first document wins ties.
        if found and (best is None or len(found) > best.score):
            best = SearchHit(id=doc.id, score=float(len(found)), terms=found)
    return [best] if best is not None else []


def is_front_desk(url: str, title: str) -> bool:
    return "front-desk" in (url or "").lower() or "front desk" in (title or "").lower()


def promote_front_desk(snapshot: IndexSnapshot, hits: list[SearchHit]) -> list[SearchHit]:
    for i, hit in enumerate(hits):
        doc = snapshot.document(hit.id)
        if is_front_desk(doc.url, doc.title):
            if i == 0:
                return hits
            return [hit] + hits[:i] + hits[i + 1 :]
    return hits


class Retriever:
    def __init__(self, snapshot: IndexSnapshot, *, cascade: tuple[Stage, ...] = CASCADE) -> None:
        self._snapshot = snapshot
        self._cascade = cascade

    def _run_cascade(self, q: AnalyzedQuestion) -> Retrieval:
        for stage in self._cascade:
            query = q.expanded if stage.use_expanded else q.text
            hits = self._snapshot.index.search(query, stage.options)
            if hits:
                return Retrieval(stage=stage.name, hits=hits)
        hits = literal_fallback(self._snapshot, q.key_terms)
        if hits:
            return Retrieval(stage=LITERAL_STAGE, hits=hits)
        return Retrieval(stage=None, hits=[])

    def retrieve(self, q: AnalyzedQuestion) -> Retrieval:
        if not q.text:
            return Retrieval(stage=None, hits=[])
        result = self._run_cascade(q)
        if q.intent == "hours" and result.hits:
            result = Retrieval(stage=result.stage, hits=promote_front_desk(self._snapshot, result.hits))
        logger.debug("Retrieval stage=%s hits=%s intent=%s", result.stage, len(result.hits), q.intent)
        return result
