from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from site_answers.core.intents import AnalyzedQuestion
from site_answers.core.models import Source
from site_answers.core.search_index import IndexSnapshot, SearchHit
from site_answers.core.utils import collapse_whitespace

SNIPPET_BEFORE = 180
SNIPPET_AFTER = 420

GENERIC_SENTENCE = "CSI has information on this topic on the linked page below."
FOOTER = " For more details or specific edge cases, check the links below or contact the CSI front desk."
DEFAULT_INTRO = "Here’s the most relevant information I found on the CSI site: "

INTROS: dict[str, str] = {
    "hours": "Here’s what the CSI site says about front desk hours: ",
    "location": "Here’s where CSI is located and how to find it: ",
    "advisor": "Here’s how you can connect with a Student Organization Advisor (SILC): ",
    "tap": "Here’s how TAP (Triton Activities Planner) works for events: ",
    "register": "Here’s how registering or re-registering your student org works: ",
    "finances": "Here’s how student org finances and funding are handled: ",
    "service": "Here are the service and community programs related to your question: ",
    "leadership": "Here are the Communication & Leadership options that may fit: ",
    "sfl": "Here’s what CSI shares about Fraternity & Sorority Life (SFL): ",
    "edi": "Here’s what the CSI site shares about equity, diversity, and inclusion: ",
    "jobs": "Here’s what I found about student jobs with CSI: ",
}

_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class MatchSnippet:
    snippet: str
    start: int
    end: int


def earliest_term_offset(text: str, terms: Sequence[str]) -> int:
    lower = text.lower()
    best: int | None = None
    for term in terms:
        if not term:
            continue
        p = lower.find(term.lower())
        if p >= 0 and (best is None or p < best):
            best = p
    return 0 if best is None else best


def make_snippet(
    text: str,
    terms: Sequence[str],
    *,
    before: int = SNIPPET_BEFORE,
    after: int = SNIPPET_AFTER,
) -> MatchSnippet:
    if not text:
        return MatchSnippet(snippet="", start=0, end=0)
    idx = earliest_term_offset(text, terms)
    start = max(0, idx - before)
    end = min(len(text), idx + after)
    return MatchSnippet(snippet=collapse_whitespace(text[start:end]), start=start, end=end)


def first_sentences(snippet: str, limit: int = 3) -> str:
    if not snippet:
        return ""
    parts = _SENTENCE_BREAK_RE.split(snippet)
    return " ".join(parts[:limit]).strip()


def intent_intro(intent: str | None) -> str:
    return INTROS.get(intent or "", DEFAULT_INTRO)


def compose_answer(
    q: AnalyzedQuestion,
    hits: Sequence[SearchHit],
    snapshot: IndexSnapshot,
    *,
    max_sources: int = 3,
    max_sentences: int = 3,
    default_terms: Sequence[str] = (),
) -> tuple[str, list[Source]]:
    if not hits:
        return "", []

    top = [snapshot.document(h.id) for h in hits[:max_sources]]
    sources = [Source(url=d.url, title=d.title or "Result", section=d.section or "") for d in top]

    terms = q.key_terms or tuple(default_terms)
    main = make_snippet(top[0].text or "", terms)
    core = first_sentences(main.snippet, max_sentences) or GENERIC_SENTENCE
    return (intent_intro(q.intent) + core + FOOTER).strip(), sources
