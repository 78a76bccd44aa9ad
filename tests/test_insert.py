"""Tests for reference insertion."""

import pytest

from mentionkit.compose.insert import insert_reference
from mentionkit.core.extract import extract
from mentionkit.core.grammar import GrammarError
from mentionkit.core.model import Candidate, InsertResult, ReferenceOccurrence
from mentionkit.format.convert import to_display

ALICE = Candidate(id="u1", label="Alice Wong")


def test_insert_replaces_trigger():
    """Test the basic "Hey @al" -> mention case."""
    result = insert_reference("Hey @al", 7, ALICE)
    assert result == InsertResult(storage_text="Hey @[Alice Wong](u1) ", display_caret=16)
    assert extract(result.storage_text) == [
        ReferenceOccurrence(label="Alice Wong", id="u1", storage_start=4, storage_end=21)
    ]
    # Caret sits right after the trailing space
    assert to_display(result.storage_text)[:result.display_caret] == "Hey @Alice Wong "


def test_insert_keeps_text_after_caret():
    """Test that text after the caret survives."""
    result = insert_reference("Hey @al there", 7, ALICE)
    assert result.storage_text == "Hey @[Alice Wong](u1)  there"
    assert result.display_caret == 16


def test_insert_after_existing_mention():
    """Test storage-space splicing past an earlier token."""
    result = insert_reference("@[Bob](u2) @al", 8, ALICE)
    assert result.storage_text == "@[Bob](u2) @[Alice Wong](u1) "
    assert result.display_caret == 17
    assert [o.id for o in extract(result.storage_text)] == ["u2", "u1"]


def test_insert_before_existing_mention():
    """Test that a later token is left intact."""
    storage = "@a then @[Bob](u2)"
    result = insert_reference(storage, 2, ALICE)
    assert result.storage_text == "@[Alice Wong](u1)  then @[Bob](u2)"
    assert [o.id for o in extract(result.storage_text)] == ["u1", "u2"]


def test_insert_without_trigger_goes_at_caret():
    """Test insertion with no "@" before the caret."""
    result = insert_reference("Hello", 5, ALICE)
    assert result.storage_text == "Hello@[Alice Wong](u1) "
    assert result.display_caret == 17


def test_insert_with_caret_inside_mention():
    """Test that a caret inside a collapsed label inserts after it."""
    result = insert_reference("@[Bob](u2)", 2, ALICE)
    assert result.storage_text == "@[Bob](u2)@[Alice Wong](u1) "
    assert result.display_caret == 16


def test_insert_clamps_caret():
    """Test an out-of-range caret."""
    result = insert_reference("@al", 50, ALICE)
    assert result.storage_text == "@[Alice Wong](u1) "
    assert result.display_caret == 12


def test_insert_adds_exactly_one_occurrence():
    """Test well-formed output across notes and carets."""
    notes = ["", "x", "@[Bob](u2) hi @c", "a @[Bob](u2)", "@ @ @"]
    for storage in notes:
        before = extract(storage)
        display = to_display(storage)
        for caret in range(len(display) + 1):
            result = insert_reference(storage, caret, ALICE)
            after = extract(result.storage_text)
            assert len(after) == len(before) + 1
            assert sum(1 for o in after if (o.label, o.id) == ("Alice Wong", "u1")) == 1


def test_insert_rejects_unencodable_candidate():
    """Test a label that would break the grammar."""
    with pytest.raises(GrammarError):
        insert_reference("@a", 2, Candidate(id="u9", label="A]B"))


def test_insert_after_unclosed_open_bracket():
    """Test that typed "@[" text before the trigger stays plain."""
    result = insert_reference("[x @[foo @al", 12, ALICE)
    assert result.storage_text == "[x @[foo @[Alice Wong](u1) "
    assert result.display_caret == 21
    assert extract(result.storage_text) == [
        ReferenceOccurrence(label="Alice Wong", id="u1", storage_start=9, storage_end=26)
    ]
    assert to_display(result.storage_text) == "[x @[foo @Alice Wong "
