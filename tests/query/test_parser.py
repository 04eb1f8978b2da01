"""
Tests for QueryParser.
"""

import pytest
from datetime import datetime, timedelta

from recall.query import QueryParser, QueryType, parse_query, STOP_WORDS


class TestQueryTypeDetection:
    """Classification by ordered pattern families."""

    @pytest.mark.parametrize("text,expected", [
        ("What is the Falcon project?", QueryType.FACTUAL),
        ("tell me about the offsite", QueryType.FACTUAL),
        ("Explain the billing change", QueryType.FACTUAL),
        ("Who works with Sarah on the roadmap", QueryType.RELATIONAL),
        ("what projects are related to Acme", QueryType.RELATIONAL),
        ("experts on kubernetes", QueryType.RELATIONAL),
        ("recent updates from Acme Corp", QueryType.TEMPORAL),
        ("Latest notes", QueryType.TEMPORAL),
        ("last month invoices", QueryType.TEMPORAL),
        ("What happened recently with hiring", QueryType.TEMPORAL),
        ("Show me everything about Berlin", QueryType.EXPLORATORY),
        ("browse my travel notes", QueryType.EXPLORATORY),
        ("random unrelated text", QueryType.SEMANTIC),
    ])
    def test_query_types(self, parser, text, expected):
        assert parser.parse(text).query_type == expected

    def test_priority_factual_before_relational(self, parser):
        """'what is ... related to' matches both families; factual is checked first."""
        assert parser.parse("what is related to Acme").query_type == QueryType.FACTUAL

    def test_patterns_are_anchored(self, parser):
        """Pattern words in the middle of the query do not classify it."""
        assert parser.parse("notes to explore later").query_type == QueryType.SEMANTIC

    def test_leading_whitespace_is_trimmed(self, parser):
        assert parser.parse("   describe the process").query_type == QueryType.FACTUAL


class TestEntityExtraction:

    def test_capitalised_words_after_first(self, parser):
        query = parser.parse("recent updates from Acme Corp")
        assert query.entities == ("Acme", "Corp")

    def test_first_word_is_not_an_entity(self, parser):
        query = parser.parse("Berlin trip plans")
        assert query.entities == ()

    def test_quoted_phrases(self, parser):
        query = parser.parse('notes on "project phoenix" budget')
        assert query.entities == ("project phoenix",)

    def test_trailing_punctuation_stripped(self, parser):
        query = parser.parse("What is Falcon?")
        assert query.entities == ("Falcon",)

    def test_deduplicated_case_sensitive(self, parser):
        query = parser.parse('Find "anna" with Anna and Anna')
        assert query.entities == ("anna", "Anna")

    def test_all_caps_not_a_proper_noun(self, parser):
        query = parser.parse("notes about NASA")
        assert query.entities == ()


class TestKeywordExtraction:

    def test_stop_words_and_short_tokens_removed(self, parser):
        query = parser.parse("The API is at v2 for Project X!!")
        assert query.keywords == ("api", "project")

    def test_deduplicated_lowercase(self, parser):
        query = parser.parse("Budget budget BUDGET review")
        assert query.keywords == ("budget", "review")

    def test_stop_word_list(self):
        assert "about" in STOP_WORDS
        assert "the" in STOP_WORDS
        assert "budget" not in STOP_WORDS


class TestTemporalExtraction:
    """Windows are computed relative to Wednesday 2026-10-14 12:00."""

    def test_recent(self, parser, fixed_now):
        window = parser.parse("recent updates").temporal_window
        assert window.label == "recent"
        assert window.start == fixed_now - timedelta(days=7)
        assert window.end == fixed_now

    def test_today(self, parser, fixed_now):
        window = parser.parse("what did I write today").temporal_window
        assert window.label == "today"
        assert window.start == datetime(2026, 10, 14, 0, 0, 0)
        assert window.end == fixed_now

    def test_yesterday(self, parser):
        window = parser.parse("notes from yesterday").temporal_window
        assert window.start == datetime(2026, 10, 13, 0, 0, 0)
        assert window.end == datetime(2026, 10, 13, 23, 59, 59, 999999)

    def test_this_week_starts_monday(self, parser, fixed_now):
        window = parser.parse("meetings this week").temporal_window
        assert window.start == datetime(2026, 10, 12, 0, 0, 0)
        assert window.end == fixed_now

    def test_last_week_is_previous_monday_to_sunday(self, parser):
        window = parser.parse("calls from last week").temporal_window
        assert window.label == "last week"
        assert window.start == datetime(2026, 10, 5, 0, 0, 0)
        assert window.end == datetime(2026, 10, 11, 23, 59, 59, 999999)
        assert window.start.weekday() == 0
        assert window.end.weekday() == 6

    def test_last_month(self, parser):
        window = parser.parse("expenses last month").temporal_window
        assert window.start == datetime(2026, 9, 1, 0, 0, 0)
        assert window.end == datetime(2026, 9, 30, 23, 59, 59, 999999)

    def test_last_month_across_year_boundary(self):
        query = parse_query("expenses last month", now=datetime(2026, 1, 15, 9, 30))
        assert query.temporal_window.start == datetime(2025, 12, 1)
        assert query.temporal_window.end == datetime(2025, 12, 31, 23, 59, 59, 999999)

    def test_first_phrase_in_list_order_wins(self, parser):
        window = parser.parse("recent notes from last week").temporal_window
        assert window.label == "recent"

    def test_no_temporal_phrase(self, parser):
        assert parser.parse("random unrelated text").temporal_window is None

    def test_window_contains(self, parser):
        window = parser.parse("calls from last week").temporal_window
        assert window.contains(datetime(2026, 10, 8, 15, 0))
        assert not window.contains(datetime(2026, 10, 12, 0, 0))


class TestConfidenceAndIntent:

    def test_semantic_fallback_base_confidence(self, parser):
        query = parser.parse("hello")
        assert query.query_type == QueryType.SEMANTIC
        assert query.confidence == pytest.approx(0.5)

    def test_keyword_bonus(self, parser):
        assert parser.parse("random unrelated text").confidence == pytest.approx(0.6)

    def test_type_entity_and_keyword_bonus(self, parser):
        # 0.5 + 0.2 (factual) + 0.15 (one entity) + 0.1 (two keywords)
        assert parser.parse("What is the Falcon project?").confidence == pytest.approx(0.95)

    def test_clamped_to_one(self, parser):
        assert parser.parse("recent updates from Acme Corp").confidence == pytest.approx(1.0)

    def test_intent_temporal_uses_keywords(self, parser):
        query = parser.parse("recent updates from Acme Corp")
        assert query.intent == "Find recent activity related to: recent, updates, acme"

    def test_intent_factual_without_entities(self, parser):
        query = parser.parse("explain the billing change")
        assert query.intent == "Find factual information about: general"


class TestParserProperties:

    def test_deterministic(self, parser):
        text = 'Who works with "Jane Doe" on Falcon last week?'
        assert parser.parse(text) == parser.parse(text)

    def test_original_text_preserved(self, parser):
        text = "  Recent Updates From Acme  "
        assert parser.parse(text).original_text == text

    def test_empty_text_never_fails(self, parser):
        query = parser.parse("")
        assert query.query_type == QueryType.SEMANTIC
        assert query.entities == ()
        assert query.keywords == ()
        assert query.temporal_window is None

    def test_uses_injected_clock(self):
        calls = []

        def clock():
            calls.append(1)
            return datetime(2026, 10, 14, 12, 0)

        QueryParser(now_fn=clock).parse("recent notes")
        assert calls

    def test_to_dict(self, parser):
        data = parser.parse("recent updates from Acme Corp").to_dict()
        assert data["query_type"] == "temporal"
        assert data["entities"] == ["Acme", "Corp"]
        assert data["temporal_window"]["label"] == "recent"
