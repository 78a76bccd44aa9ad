"""Tests for candidate matching."""

from mentionkit.compose.matcher import MAX_SUGGESTIONS, match_candidates
from mentionkit.core.model import Candidate

TEAM = [
    Candidate(id="u1", label="Alice Wong", role="sales"),
    Candidate(id="u2", label="Bob Alvarez"),
    Candidate(id="u3", label="Carol"),
    Candidate(id="u4", label="Dalia"),
    Candidate(id="u5", label="Sal"),
    Candidate(id="u6", label="Halvard"),
    Candidate(id="u7", label="Alan"),
]


def test_case_insensitive_substring():
    """Test that the label may contain the query anywhere."""
    ids = [c.id for c in match_candidates(TEAM, "AL")]
    assert ids == ["u1", "u2", "u4", "u5", "u6"]


def test_limit_bounds_results():
    """Test the default and explicit limits."""
    assert MAX_SUGGESTIONS == 5
    assert len(match_candidates(TEAM, "")) == 5
    assert [c.id for c in match_candidates(TEAM, "al", limit=2)] == ["u1", "u2"]
    assert match_candidates(TEAM, "al", limit=0) == []


def test_empty_query_keeps_input_order():
    """Test that an empty partial label lists candidates in order."""
    assert [c.id for c in match_candidates(TEAM, "", limit=10)] == [c.id for c in TEAM]


def test_no_match_and_empty_roster():
    """Test nothing-to-do outcomes."""
    assert match_candidates(TEAM, "zzz") == []
    assert match_candidates([], "al") == []


def test_unencodable_candidates_are_skipped():
    """Test that labels or ids breaking the token grammar are filtered out."""
    team = [
        Candidate(id="u1", label="Ops [EU]"),
        Candidate(id="u)2", label="Opal"),
        Candidate(id="u3", label="Oprah"),
    ]
    assert [c.id for c in match_candidates(team, "op")] == ["u3"]
