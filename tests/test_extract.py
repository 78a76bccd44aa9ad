"""Tests for reference extraction."""

from mentionkit.core.extract import extract, extract_ids
from mentionkit.core.model import ReferenceOccurrence
from mentionkit.format.convert import to_display


def test_extract_empty():
    """Test text without references."""
    assert extract("") == []
    assert extract("plain note, no mentions") == []


def test_extract_single():
    """Test spans of a single reference."""
    text = "Hey @[Alice Wong](u1) "
    assert extract(text) == [
        ReferenceOccurrence(label="Alice Wong", id="u1", storage_start=4, storage_end=21)
    ]


def test_extract_multi_mention_order():
    """Test that order follows storage, not label."""
    occurrences = extract("@[Bob](u2) re @[Alice](u1)")
    assert [o.id for o in occurrences] == ["u2", "u1"]
    assert occurrences[0].storage_start < occurrences[1].storage_start


def test_extract_spans_cover_token():
    """Test that span length equals the token's encoded length."""
    text = "x @[Bob](u2) y"
    (o,) = extract(text)
    assert text[o.storage_start:o.storage_end] == "@[Bob](u2)"
    assert o.storage_len == len("@[Bob](u2)")
    assert o.display_len == len("@Bob")
    assert o.display_form == "@Bob"


def test_extract_tolerates_truncation():
    """Test that a truncated note still yields its complete tokens."""
    text = "@[Alice](u1) and @[Bo"
    assert [o.id for o in extract(text)] == ["u1"]


def test_extract_ids_keeps_duplicates():
    """Test that ids are not de-duplicated."""
    text = "@[Bob](u2) and @[Alice](u1) and again @[Bob](u2)"
    assert extract_ids(text) == ["u2", "u1", "u2"]


def test_display_text_has_no_tokens():
    """Test that projected text never contains a token."""
    for text in [
        "",
        "@[Bob](u2)",
        "a @[Bob](u2) b @[Alice Wong](u1)",
        "@[a](1)@[b](2)",
        "broken @[x](",
    ]:
        assert extract(to_display(text)) == []
