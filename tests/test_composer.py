from __future__ import annotations

from site_answers.core.composer import (
    DEFAULT_INTRO,
    FOOTER,
    GENERIC_SENTENCE,
    INTROS,
    compose_answer,
    first_sentences,
    make_snippet,
)
from site_answers.core.intents import AnalyzedQuestion
from site_answers.core.models import Document
from site_answers.core.search_index import IndexSnapshot, SearchHit


def _question(intent: str | None = None, terms: tuple[str, ...] = ()) -> AnalyzedQuestion:
    return AnalyzedQuestion(text="q", intent=intent, expanded="q", key_terms=terms)


def test_snippet_window_centers_on_earliest_key_term() -> None:
    text = ("a" * 500) + " Front desk hours are 9 to 5. " + ("b" * 600)
    sn = make_snippet(text, ("hours",))
    assert "hours" in sn.snippet
    idx = text.lower().find("hours")
    assert sn.start == idx - 180
    assert sn.end == idx + 420


def test_snippet_uses_earliest_of_several_terms() -> None:
    text = "zzz " * 100 + "desk " + "yyy " * 100 + "hours"
    sn = make_snippet(text, ("hours", "desk"))
    assert sn.start == text.find("desk") - 180
    assert "desk" in sn.snippet


def test_snippet_starts_at_zero_without_term_and_clamps() -> None:
    sn = make_snippet("short text", ("missing",))
    assert (sn.start, sn.end, sn.snippet) == (0, 10, "short text")
    assert make_snippet("", ("x",)).snippet == ""


def test_first_sentences_caps_at_three() -> None:
    assert first_sentences("One. Two! Three? Four.") == "One. Two! Three?"
    assert first_sentences("No terminal punctuation here") == "No terminal punctuation here"
    assert first_sentences("") == ""


def test_compose_uses_top_document_and_caps_sentences() -> None:
    docs = [
        Document(id=0, url="https://example.com/a", title="A", section="S", text="First. Second. Third. Fourth. Fifth."),
        Document(id=1, url="https://example.com/b", title="", section="", text="Other page text."),
    ]
    snap = IndexSnapshot.build(docs)
    text, sources = compose_answer(_question(None, ("first",)), [SearchHit(0, 2.0), SearchHit(1, 1.0)], snap)
    assert text == (DEFAULT_INTRO + "First. Second. Third." + FOOTER).strip()
    assert "Fourth" not in text
    assert "Other page" not in text
    assert [s.url for s in sources] == ["https://example.com/a", "https://example.com/b"]
    assert sources[1].title == "Result"


def test_compose_falls_back_to_generic_sentence_and_intent_intro() -> None:
    snap = IndexSnapshot.build([Document(id=0, url="https://example.com/x", title="X", section="", text="")])
    text, _ = compose_answer(_question("hours", ("hours",)), [SearchHit(0, 1.0)], snap)
    assert text.startswith(INTROS["hours"])
    assert GENERIC_SENTENCE in text


def test_compose_limits_sources_to_three(site_documents) -> None:
    docs = site_documents + [
        Document(id=3, url="https://example.com/extra", title="Extra", section="", text="More.")
    ]
    snap = IndexSnapshot.build(docs)
    hits = [SearchHit(i, 10.0 - i) for i in range(4)]
    _, sources = compose_answer(_question(), hits, snap, default_terms=("csi",))
    assert len(sources) == 3


def test_compose_without_hits_is_empty() -> None:
    snap = IndexSnapshot.build([])
    assert compose_answer(_question(), [], snap) == ("", [])
