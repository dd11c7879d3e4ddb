"""Unit tests for the TF-IDF query engine."""

import pytest

from chat_search.search.index_manager import IndexManager
from chat_search.search.models import Document
from chat_search.search.query_engine import MAX_RESULTS, QueryEngine
from chat_search.search.storage import InMemoryKeyValueStore


def build_engine(records, scope="chat1", manager=None):
    manager = manager or IndexManager(InMemoryKeyValueStore())
    for record in records:
        manager.index.update_document(Document.from_record(record, scope))
    return QueryEngine(manager)


@pytest.fixture
def engine(sample_messages):
    return build_engine(sample_messages)


@pytest.mark.unit
class TestRanking:
    def test_authentication_query_finds_single_message(self, engine):
        results = engine.search("authentication login", "chat1")

        assert len(results) == 1
        assert "authentication" in results[0].document.text
        assert results[0].score > 0
        assert results[0].matched_terms == ["authentication", "login"]

    def test_irrelevant_query_returns_nothing(self, engine):
        assert engine.search("cooking recipes", "chat1") == []

    @pytest.mark.parametrize("query", ["database connection", "production deployment", "endpoint registration"])
    def test_topic_queries_rank_the_matching_message_first(self, engine, query):
        results = engine.search(query, "chat1")

        assert results
        assert query.split()[0] in results[0].document.text.lower()

    def test_stopwords_and_case_do_not_change_results(self, engine):
        assert engine.search("THE authentication BUG", "chat1") == engine.search("authentication bug", "chat1")

    def test_punctuation_in_query(self, engine):
        assert engine.search("authentication, bug!", "chat1")

    def test_unknown_terms_do_not_block_known_ones(self, engine):
        results = engine.search("authentication kubernetes", "chat1")

        assert len(results) == 1
        assert 0 < results[0].score < 1
        assert results[0].matched_terms == ["authentication"]

    def test_scores_are_bounded_and_descending(self):
        engine = build_engine(
            [
                {"id": "a", "text": "deployment failed during deployment window"},
                {"id": "b", "text": "deployment checklist for friday"},
                {"id": "c", "text": "frontend styling review notes"},
                {"id": "d", "text": "quarterly planning meeting agenda"},
            ]
        )

        results = engine.search("deployment window")
        scores = [result.score for result in results]

        assert [result.document.id for result in results] == ["a", "b"]
        assert all(0 <= score <= 1 for score in scores)
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_insertion_order(self):
        engine = build_engine(
            [
                {"id": "z", "text": "shared deployment notes"},
                {"id": "y", "text": "shared deployment notes"},
                {"id": "x", "text": "shared deployment notes"},
                {"id": "w", "text": "unrelated frontend styling"},
            ]
        )

        results = engine.search("deployment")

        assert [result.document.id for result in results] == ["z", "y", "x"]
        assert len({result.score for result in results}) == 1

    def test_matched_terms_are_deduplicated_in_query_order(self):
        engine = build_engine(
            [
                {"id": "a", "text": "release notes for deployment"},
                {"id": "b", "text": "frontend styling review"},
            ]
        )

        results = engine.search("notes deployment notes")

        assert results[0].matched_terms == ["notes", "deployment"]


@pytest.mark.unit
class TestQueryGuards:
    @pytest.mark.parametrize("query", ["", " ", "a", "  x  "])
    def test_too_short_queries_return_nothing(self, engine, query):
        assert engine.search(query) == []

    def test_stopword_only_query_returns_nothing(self, engine):
        assert engine.search("the and of") == []

    def test_empty_index_returns_nothing(self):
        assert QueryEngine(IndexManager(InMemoryKeyValueStore())).search("authentication") == []


@pytest.mark.unit
class TestScopeAndLimits:
    def test_scope_isolation(self, sample_messages):
        manager = IndexManager(InMemoryKeyValueStore())
        build_engine(sample_messages, scope="A", manager=manager)
        engine = build_engine(
            [{"id": "b1", "text": "authentication outage in region two"}],
            scope="B",
            manager=manager,
        )

        only_a = engine.search("authentication", scope="A")
        everything = engine.search("authentication")

        assert [result.document.scope for result in only_a] == ["A"]
        assert {result.document.scope for result in everything} == {"A", "B"}
        assert engine.search("authentication", scope="") == everything
        assert engine.search("authentication", scope="C") == []

    def test_limit_and_absolute_cap(self):
        records = [{"id": f"r{i}", "text": f"deployment checklist item{i}"} for i in range(60)]
        records += [{"id": f"u{i}", "text": f"unrelated frontend styling {i}"} for i in range(5)]
        engine = build_engine(records)

        assert len(engine.search("deployment", limit=3)) == 3
        assert len(engine.search("deployment", limit=100)) == MAX_RESULTS
        assert len(engine.search("deployment")) == 20
        assert engine.search("deployment", limit=0) == []
        assert engine.search("deployment", limit=-5) == []
