from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Intent:
    id: str
    keywords: frozenset[str]


def _intent(id: str, *keywords: str) -> Intent:
    return Intent(id=id, keywords=frozenset(keywords))


# Order is tie-break priority: the first intent with any matching keyword wins.
INTENTS: tuple[Intent, ...] = (
    _intent("hours", "hour", "hours", "open", "opening", "closing", "close", "what time", "when are you open", "office hours"),
    _intent("location", "where are you", "location", "address", "price center", "price centre", "pce", "map"),
    _intent(
        "advisor",
        "advisor",
        "adviser",
        "advising",
        "silc",
        "student organization advisor",
        "meet with an advisor",
        "drop-in advising",
        "drop in advising",
        "appointment",
    ),
    _intent(
        "tap",
        "tap",
        "triton activities planner",
        "event request",
        "event planning",
        "venue request",
        "space request",
        "reservation",
        "event form",
    ),
    _intent(
        "register",
        "register",
        "registration",
        "re-register",
        "reregister",
        "renew",
        "renewal",
        "new organization",
        "starting a new org",
        "principal member",
        "community mentor",
    ),
    _intent(
        "finances",
        "funding",
        "finance",
        "finances",
        "money",
        "slbo",
        "fund manager",
        "budget",
        "account",
        "reimbursement",
        "payment",
    ),
    _intent(
        "service",
        "service",
        "volunteer",
        "community service",
        "alternative breaks",
        "justicecorps",
        "days of service",
        "tritons take charge",
        "community pathways",
    ),
    _intent("leadership", "leadership", "ilead", "communication & leadership", "leadership conference", "workshop", "training"),
    _intent("sfl", "sfl", "fraternity", "sorority", "greek", "greek life"),
    _intent("edi", "edi", "equity", "diversity", "inclusion", "anti-racism", "belonging"),
    _intent("jobs", "job", "jobs", "work", "hiring", "employment", "position", "get paid", "student staff"),
)

SYNONYM_SETS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "tap": ("tap", "triton activities planner", "event planning", "event request", "venue", "reservation", "space", "events", "event form"),
        "finances": ("finance", "finances", "funding", "slbo", "fund manager", "budget", "accounts", "money"),
        "advisor": ("advisor", "advisors", "advising", "silc", "student organization advisor", "drop-in", "drop in"),
        "register": ("register", "registration", "re-register", "renew", "principal member", "community mentor", "new org"),
        "service": (
            "service",
            "volunteer",
            "community service",
            "alternative breaks",
            "justicecorps",
            "days of service",
            "tritons take charge",
            "community pathways",
        ),
        "leadership": ("leadership", "ilead", "workshop", "training", "communication & leadership"),
        "sfl": ("sfl", "fraternity", "sorority", "greek life", "greek"),
        "edi": ("edi", "equity", "diversity", "inclusion", "anti-racism"),
        "hours": ("hours", "open", "opening", "closing", "front desk"),
        "location": ("location", "address", "price center", "pce"),
    }
)

_NON_WORD_RE = re.compile(r"\W+")
MIN_KEY_TERM_LENGTH = 3


@dataclass(frozen=True)
class AnalyzedQuestion:
    text: str
    intent: str | None
    expanded: str
    key_terms: tuple[str, ...]


def classify_intent(question: str, intents: tuple[Intent, ...] = INTENTS) -> str | None:
    low = (question or "").lower()
    for intent in intents:
        if any(k in low for k in intent.keywords):
            return intent.id
    return None


def expand_query(
    question: str,
    intent: str | None,
    *,
    synonyms: Mapping[str, tuple[str, ...]] = SYNONYM_SETS,
    cross_topic: bool = True,
) -> str:
    s = (question or "").lower()
    if intent and intent in synonyms:
        s += " " + " ".join(synonyms[intent])
    if not cross_topic:
        return s
    # Substring overlap against the growing string, so one appended set can pull in another.
    for terms in synonyms.values():
        if any(t in s for t in terms):
            s += " " + " ".join(terms)
    return s


def key_terms(
    question: str,
    intent: str | None,
    *,
    synonyms: Mapping[str, tuple[str, ...]] = SYNONYM_SETS,
) -> tuple[str, ...]:
    base = [t for t in _NON_WORD_RE.split((question or "").lower()) if len(t) >= MIN_KEY_TERM_LENGTH]
    intent_terms: list[str] = []
    if intent and intent in synonyms:
        for term in synonyms[intent]:
            intent_terms.extend(t for t in _NON_WORD_RE.split(term.lower()) if t)
    return tuple(dict.fromkeys(base + intent_terms))


def analyze_question(question: str, *, cross_topic: bool = True) -> AnalyzedQuestion:
    text = (question or "").strip()
    intent = classify_intent(text)
    return AnalyzedQuestion(
        text=text,
        intent=intent,
        expanded=expand_query(text, intent, cross_topic=cross_topic),
        key_terms=key_terms(text, intent),
    )
