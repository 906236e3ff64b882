"""Tests for the lexical, filter and classification stages."""

from datetime import datetime, timedelta, timezone

import pytest

from invoxa.search.classifier import classify_query, score_confidence
from invoxa.search.filters import extract_filters
from invoxa.search.lexer import analyze_lexically
from invoxa.search.models import QueryCategory
from invoxa.search.vocabulary import COMMON_MISSPELLINGS

NOW = datetime(2024, 3, 15, 14, 30, 5, tzinfo=timezone.utc)


class TestLexicalAnalysis:
    """Test tokenization and spelling correction."""

    def test_normalizes_tokens(self):
        """Test lowercasing and whitespace splitting."""
        result = analyze_lexically("  Unpaid   INVOICES\tMarch ")
        assert result.tokens == ["unpaid", "invoices", "march"]

    def test_blank_query(self):
        """Test that blank input yields an empty analysis."""
        for query in ("", "   ", "\n\t"):
            result = analyze_lexically(query)
            assert result.tokens == []
            assert result.corrected_query is None
            assert not result.has_domain_terms

    @pytest.mark.parametrize("wrong,right", sorted(COMMON_MISSPELLINGS.items()))
    def test_every_misspelling_is_corrected(self, wrong, right):
        """Test that each table entry replaces only its own token."""
        result = analyze_lexically(f"show {wrong} list")
        assert result.corrected_query == f"show {right} list"

    def test_no_correction_without_misspelling(self):
        """Test that correct queries leave corrected_query unset."""
        assert analyze_lexically("overdue invoice").corrected_query is None

    def test_exact_match_only(self):
        """Test that near-misses outside the table are left alone."""
        result = analyze_lexically("invoiec invioces")
        assert result.corrected_query is None

    def test_domain_terms_use_corrected_tokens(self):
        """Test that a corrected misspelling counts as a domain term."""
        result = analyze_lexically("invioce recent")
        assert result.domain_terms == ["invoice"]
        assert result.has_domain_terms

    def test_domain_term_substring(self):
        """Test that plural and compound tokens still match keywords."""
        result = analyze_lexically("vendors budgeting")
        assert "vendor" in result.domain_terms
        assert "budget" in result.domain_terms

    def test_short_tokens_are_not_domain_terms(self):
        """Test that fragments of keywords do not count."""
        assert not analyze_lexically("co").has_domain_terms


class TestFilterExtraction:
    """Test trigger-based filter proposals."""

    def test_no_triggers(self):
        """Test that a plain query yields no filters."""
        assert extract_filters("overdue invoice", now=NOW) == []

    def test_recent_covers_last_week(self):
        """Test the recent date range."""
        (proposal,) = extract_filters("recent payments", now=NOW)
        assert proposal.name == "Recent"
        assert proposal.key == "dateRange"
        assert proposal.value == {
            "start": (NOW - timedelta(days=7)).isoformat(),
            "end": NOW.isoformat(),
        }

    def test_today_covers_calendar_day(self):
        """Test that today yields exactly one date range bounding the day."""
        filters = extract_filters("invoices sent today", now=NOW)
        date_filters = [f for f in filters if f.key == "dateRange"]
        assert len(date_filters) == 1

        value = date_filters[0].value
        start = datetime.fromisoformat(value["start"])
        end = datetime.fromisoformat(value["end"])
        assert (start.hour, start.minute, start.second) == (0, 0, 0)
        assert (end.hour, end.minute, end.second) == (23, 59, 59)
        assert start.date() == end.date() == NOW.date()

    def test_today_wins_over_recent(self):
        """Test that only one date range is emitted when triggers overlap."""
        filters = extract_filters("recent invoices from today", now=NOW)
        assert [f.name for f in filters] == ["Today"]

    def test_yesterday_covers_previous_day(self):
        """Test the yesterday date range."""
        (proposal,) = extract_filters("yesterday", now=NOW)
        start = datetime.fromisoformat(proposal.value["start"])
        assert proposal.name == "Yesterday"
        assert start.date() == (NOW - timedelta(days=1)).date()

    def test_role_filters(self):
        """Test own-message and assistant filters."""
        mine = extract_filters("what I asked about billing", now=NOW)
        assert [(f.key, f.value) for f in mine] == [("messageRole", "user")]

        assistant = extract_filters("assistant answers", now=NOW)
        assert [(f.key, f.value) for f in assistant] == [("messageRole", "assistant")]

    def test_triggers_need_word_boundaries(self):
        """Test that trigger words inside other words do not fire."""
        assert extract_filters("paid emails for the economy", now=NOW) == []

    def test_filters_follow_table_order(self):
        """Test that emission order ignores the order of the query words."""
        filters = extract_filters("summarized ai chats in my recent history", now=NOW)
        assert [f.name for f in filters] == ["Recent", "My Messages", "AI Responses", "Summarized"]
        assert filters[-1].value is True


class TestClassifier:
    """Test category assignment and confidence scoring."""

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("unpaid invoices", QueryCategory.INVOICE),
            ("electricity bill", QueryCategory.INVOICE),
            ("new customer onboarding", QueryCategory.CLIENT),
            ("travel cost", QueryCategory.EXPENSE),
            ("quarterly analytics", QueryCategory.REPORT),
            ("team lunch", QueryCategory.GENERAL),
            ("", QueryCategory.GENERAL),
        ],
    )
    def test_categories(self, query, expected):
        """Test each category keyword pair."""
        assert classify_query(query) == expected

    def test_priority_order(self):
        """Test that invoice keywords beat client keywords."""
        assert classify_query("client invoice report") == QueryCategory.INVOICE
        assert classify_query("customer expense report") == QueryCategory.CLIENT

    def test_confidence_scoring(self):
        """Test the scoring rule step by step."""
        assert score_confidence("tax", False) == 0.5
        assert score_confidence("tax", True) == 0.8
        assert score_confidence("tax filings", False) == 0.6
        assert score_confidence("tax filings for march", True) == 1.0
        assert score_confidence("ab", False) == 0.2

    def test_short_query_penalty(self):
        """Test that very short queries without domain terms score under base."""
        for query in ("", "a", "zz"):
            assert score_confidence(query, False) < 0.5

    def test_confidence_is_clamped(self):
        """Test that scores stay within bounds."""
        for query in ("", "x" * 200):
            for has_terms in (True, False):
                assert 0.0 <= score_confidence(query, has_terms) <= 1.0
