"""Tests for contact_matching.py - name normalization and candidate ranking."""
from boomerang.services.contact_matching import (
    normalize_text, rank_candidates, resolve_exact, similarity,
)

CONTACTS = [
    {"id": "c1", "name": "Sarah Johnson", "phone": "+15551234567"},
    {"id": "c2", "name": "Sara Jonson", "phone": None, "email": None},
    {"id": "c3", "name": "Mike Davis", "phone": "+15559876543"},
    {"id": "c4", "name": "Lisa Chen", "email": "lisa.chen@email.com"},
]


class TestNormalizeText:
    def test_diacritics_and_case(self):
        assert normalize_text("  Zoë   MÜLLER ") == "zoe muller"

    def test_none(self):
        assert normalize_text(None) == ""


class TestSimilarity:
    def test_identical(self):
        assert similarity("Mike Davis", "mike  davis") == 1.0

    def test_prefix_tokens_boosted(self):
        assert similarity("Sarah", "Sarah Johnson") >= 0.7

    def test_unrelated(self):
        assert similarity("Sarah", "Robert Wilson") < 0.45


class TestResolveExact:
    def test_single_match(self):
        assert resolve_exact("sarah johnson", CONTACTS)["id"] == "c1"

    def test_no_match(self):
        assert resolve_exact("Sarah", CONTACTS) is None

    def test_duplicate_names_are_ambiguous(self):
        contacts = CONTACTS + [{"id": "c5", "name": "Sarah Johnson"}]
        assert resolve_exact("Sarah Johnson", contacts) is None


class TestRankCandidates:
    def test_best_first(self):
        ranked = rank_candidates("Sarah Jonson", CONTACTS)
        assert [c["id"] for c in ranked][:2] in (["c2", "c1"], ["c1", "c2"])
        assert all(c["id"] not in ("c3", "c4") for c in ranked)

    def test_ties_prefer_contact_method(self):
        contacts = [
            {"id": "bare", "name": "Sam Lee"},
            {"id": "reachable", "name": "Sam Lee", "phone": "+15550001111"},
        ]
        assert [c["id"] for c in rank_candidates("Sam Lee", contacts)] == ["reachable", "bare"]

    def test_limit(self):
        contacts = [{"id": str(i), "name": f"Sarah {i}"} for i in range(10)]
        assert len(rank_candidates("Sarah", contacts, limit=3)) == 3

    def test_nothing_similar(self):
        assert rank_candidates("Zebulon", CONTACTS) == []

    def test_deterministic(self):
        assert rank_candidates("Sarah", CONTACTS) == rank_candidates("Sarah", list(CONTACTS))
