from __future__ import annotations

from site_answers.core.intents import analyze_question
from site_answers.core.models import Document
from site_answers.core.retrieval import Retriever, literal_fallback, promote_front_desk
from site_answers.core.search_index import IndexSnapshot, SearchHit, SearchIndex


class RecordingIndex(SearchIndex):
    def __init__(self, documents) -> None:
        super().__init__(documents)
        self.calls: list[tuple[str, str]] = []

    def search(self, query, options=None):
        hits = super().search(query, options)
        self.calls.append((query, options.combine_with if options else "OR"))
        return hits


def _recording_snapshot(docs) -> IndexSnapshot:
    docs = tuple(docs)
    return IndexSnapshot(documents=docs, index=RecordingIndex(docs))


def test_hours_question_promotes_front_desk_page(site_documents) -> None:
    snap = IndexSnapshot.build(site_documents)
    q = analyze_question("what are csi front desk hours")
    result = Retriever(snap).retrieve(q)
    assert result.stage == "forgiving"
    assert [h.id for h in result.hits][:2] == [1, 0]


def test_cascade_stops_at_first_stage_with_hits(site_documents) -> None:
    snap = _recording_snapshot(site_documents)
    result = Retriever(snap).retrieve(analyze_question("csi"))
    assert result.stage == "strict"
    assert result.hits[0].id == 0
    assert len(snap.index.calls) == 1


def test_literal_fallback_runs_only_after_all_searches_miss() -> None:
    docs = [
        Document(
            id=0,
            url="https://example.com/heritage",
            title="Multicultural Celebration",
            section="Heritage Programs",
            text="Celebrations across campus throughout winter.",
        ),
        Document(id=1, url="https://example.com/other", title="Other Page", section="", text="nothing here"),
    ]
    snap = _recording_snapshot(docs)
    result = Retriever(snap).retrieve(analyze_question("cult"))
    assert [c[1] for c in snap.index.calls] == ["AND", "OR", "OR"]
    assert result.stage == "literal"
    assert [h.id for h in result.hits] == [0]


def test_no_match_anywhere_returns_nothing(site_documents) -> None:
    snap = IndexSnapshot.build(site_documents)
    result = Retriever(snap).retrieve(analyze_question("zzzz qqqq"))
    assert result.stage is None
    assert result.hits == []


def test_literal_fallback_ties_go_to_first_document() -> None:
    docs = [
        Document(id=0, url="https://example.com/a", title="Club Fair", section="", text=""),
        Document(id=1, url="https://example.com/b", title="Club Night", section="", text=""),
        Document(id=2, url="https://example.com/c", title="Nothing", section="", text="club"),
    ]
    snap = IndexSnapshot.build(docs)
    hits = literal_fallback(snap, ("club",))
    assert [h.id for h in hits] == [0]
    assert literal_fallback(snap, ()) == []
    assert literal_fallback(snap, ("absent",)) == []


def test_promote_front_desk_moves_only_that_hit(site_documents) -> None:
    snap = IndexSnapshot.build(site_documents)
    hits = [SearchHit(id=0, score=3.0), SearchHit(id=2, score=2.0), SearchHit(id=1, score=1.0)]
    assert [h.id for h in promote_front_desk(snap, hits)] == [1, 0, 2]
    already = [SearchHit(id=1, score=3.0), SearchHit(id=0, score=2.0)]
    assert promote_front_desk(snap, already) == already
    none = [SearchHit(id=0, score=3.0), SearchHit(id=2, score=2.0)]
    assert promote_front_desk(snap, none) == none
