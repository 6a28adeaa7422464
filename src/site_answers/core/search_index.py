from __future__ import annotations

import logging
import math
import re
import sqlite3
from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence

from rapidfuzz.distance import Levenshtein

from site_answers.core.models import Document

logger = logging.getLogger(__name__)


# Column order of the FTS table; bm25() weights are passed in this order.
FIELDS: tuple[str, ...] = ("title", "section", "text")
DEFAULT_BOOST: Mapping[str, float] = {"title": 6.0, "section": 3.0, "text": 1.0}

SCHEMA_SQL = """
CREATE VIRTUAL TABLE fts_docs USING fts5(
  title,
  section,
  text,
  tokenize = 'unicode61 remove_diacritics 0'
);
CREATE VIRTUAL TABLE fts_vocab USING fts5vocab(fts_docs, 'row');
"""

_PREFIX_WEIGHT = 0.375
_FUZZY_WEIGHT = 0.45
MAX_FUZZY_DISTANCE = 6

# Same token boundaries as the unicode61 tokenizer: letters and digits only.
_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    return [t.lower() for t in _TOKEN_RE.findall(text or "")]


def max_edit_distance(token: str, fuzzy: float) -> int:
    if fuzzy <= 0:
        return 0
    # Round half up, proportional to token length.
    return min(MAX_FUZZY_DISTANCE, int(math.floor(fuzzy * len(token) + 0.5)))


@dataclass(frozen=True)
class SearchOptions:
    fuzzy: float = 0.0
    prefix: bool = False
    combine_with: str = "OR"
    boost: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_BOOST))


@dataclass(frozen=True)
class SearchHit:
    id: int
    score: float
    terms: tuple[str, ...] = ()


class SearchIndex:
    """Full-text index over title, section and text held in an in-memory SQLite FTS5 table.

    FTS5 ranks single terms with bm25() and per-column weights. Query tokens are first
    expanded against the index vocabulary (exact, prefix, bounded edit distance), and
    each expansion's bm25 score is scaled by how closely it matched.
    """

    def __init__(self, documents: Sequence[Document]) -> None:
        self._doc_count = len(documents)
        self._conn = sqlite3.connect(":memory:", check_same_thread=False)
        self._conn.executescript(SCHEMA_SQL)
        self._conn.executemany(
            "INSERT INTO fts_docs(rowid, title, section, text) VALUES(?,?,?,?)",
            [(d.id, d.title or "", d.section or "", d.text or "") for d in documents],
        )
        self._conn.commit()

        self._vocabulary = sorted(str(r[0]) for r in self._conn.execute("SELECT term FROM fts_vocab"))
        self._terms = frozenset(self._vocabulary)
        self._by_length: dict[int, list[str]] = defaultdict(list)
        for term in self._vocabulary:
            self._by_length[len(term)].append(term)

    @property
    def vocabulary_size(self) -> int:
        return len(self._vocabulary)

    def _prefix_matches(self, token: str) -> dict[str, float]:
        out: dict[str, float] = {}
        i = bisect_left(self._vocabulary, token)
        while i < len(self._vocabulary) and self._vocabulary[i].startswith(token):
            term = self._vocabulary[i]
            if term != token:
                extra = len(term) - len(token)
                out[term] = _PREFIX_WEIGHT * len(token) / (len(token) + 0.3 * extra)
            i += 1
        return out

    def _fuzzy_matches(self, token: str, max_distance: int) -> dict[str, float]:
        out: dict[str, float] = {}
        if max_distance <= 0:
            return out
        n = len(token)
        for length in range(max(1, n - max_distance), n + max_distance + 1):
            for term in self._by_length.get(length, ()):
                d = Levenshtein.distance(token, term, score_cutoff=max_distance)
                if 0 < d <= max_distance:
                    out[term] = _FUZZY_WEIGHT * n / (n + d)
        return out

    def expand_token(self, token: str, options: SearchOptions) -> dict[str, float]:
        """Indexed terms a query token matches, with their match weights."""

        matches: dict[str, float] = {}
        if token in self._terms:
            matches[token] = 1.0
        candidates: list[dict[str, float]] = []
        if options.prefix:
            candidates.append(self._prefix_matches(token))
        if options.fuzzy > 0:
            candidates.append(self._fuzzy_matches(token, max_edit_distance(token, options.fuzzy)))
        for found in candidates:
            for term, weight in found.items():
                if weight > matches.get(term, 0.0):
                    matches[term] = weight
        return matches

    def term_scores(self, term: str, boost: Mapping[str, float]) -> dict[int, float]:
        """bm25 score of every document containing `term`, higher is better."""

        weights = ", ".join(repr(max(0.0, float(boost.get(f, 1.0)))) for f in FIELDS)
        rows = self._conn.execute(
            f"SELECT rowid, bm25(fts_docs, {weights}) FROM fts_docs WHERE fts_docs MATCH ?",
            ('"' + term.replace('"', '""') + '"',),
        ).fetchall()
        # FTS5 bm25() is negative, lower is better.
        return {int(r[0]): -float(r[1]) for r in rows if r[1] is not None and r[1] < 0}

    def _score_token(self, token: str, options: SearchOptions) -> dict[int, tuple[float, set[str]]]:
        out: dict[int, tuple[float, set[str]]] = {}
        for term, weight in self.expand_token(token, options).items():
            for doc_id, s in self.term_scores(term, options.boost).items():
                prev_score, terms = out.get(doc_id, (0.0, set()))
                terms.add(term)
                out[doc_id] = (prev_score + weight * s, terms)
        return out

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchHit]:
        options = options or SearchOptions()
        tokens = list(dict.fromkeys(tokenize(query)))
        if not tokens or self._doc_count == 0:
            return []

        conjunctive = options.combine_with.upper() == "AND"
        per_token = [self._score_token(tok, options) for tok in tokens]

        if conjunctive:
            if any(not scored for scored in per_token):
                return []
            candidates = set(per_token[0])
            for scored in per_token[1:]:
                candidates &= set(scored)
        else:
            candidates = set()
            for scored in per_token:
                candidates |= set(scored)

        hits: list[SearchHit] = []
        for doc_id in candidates:
            total = 0.0
            matched_tokens = 0
            terms: set[str] = set()
            for scored in per_token:
                entry = scored.get(doc_id)
                if entry is None:
                    continue
                total += entry[0]
                terms |= entry[1]
                matched_tokens += 1
            hits.append(SearchHit(id=doc_id, score=total * matched_tokens, terms=tuple(sorted(terms))))

        hits.sort(key=lambda h: (-h.score, h.id))
        return hits


@dataclass(frozen=True)
class IndexSnapshot:
    """A fully built, immutable document set and its index."""

    documents: tuple[Document, ...]
    index: SearchIndex

    @classmethod
    def build(cls, documents: Sequence[Document]) -> "IndexSnapshot":
        docs = tuple(replace(d, id=i) if d.id != i else d for i, d in enumerate(documents))
        index = SearchIndex(docs)
        logger.info("Index built: %s documents, %s terms", len(docs), index.vocabulary_size)
        return cls(documents=docs, index=index)

    def __len__(self) -> int:
        return len(self.documents)

    def document(self, doc_id: int) -> Document:
        return self.documents[doc_id]
