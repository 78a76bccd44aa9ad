"""Tests for the YAML roster adapter."""

import tempfile
from pathlib import Path

import pytest

from mentionkit.adapters.yaml_roster import (
    InMemoryRoster,
    RosterError,
    YamlRoster,
    dump_roster,
    parse_roster,
)
from mentionkit.core.model import Candidate


def test_parse_list():
    """Test a bare list of members."""
    candidates = parse_roster("""
- id: u1
  label: Alice Wong
  role: sales
- id: u2
  label: Bob
  avatar_url: https://example.com/bob.png
""")
    assert candidates == [
        Candidate(id="u1", label="Alice Wong", role="sales"),
        Candidate(id="u2", label="Bob", avatar_url="https://example.com/bob.png"),
    ]


def test_parse_members_key_and_legacy_names():
    """Test {members: [...]} and user_id/display_name fields."""
    candidates = parse_roster("""
members:
  - user_id: 42
    display_name: Carol
""")
    assert candidates == [Candidate(id="42", label="Carol")]


def test_parse_empty():
    """Test an empty file."""
    assert parse_roster("") == []


def test_parse_rejects_bad_entries():
    """Test error reporting for malformed rosters."""
    with pytest.raises(RosterError, match="entry 1"):
        parse_roster("- {id: u1, label: A}\n- {id: u2}\n")
    with pytest.raises(RosterError):
        parse_roster("- just a string\n")
    with pytest.raises(RosterError):
        parse_roster("id: u1\n")


def test_dump_then_parse():
    """Test writing a roster file."""
    team = [Candidate(id="u1", label="Zoë", role="qc"), Candidate(id="u2", label="Bob")]
    assert parse_roster(dump_roster(team)) == team


def test_in_memory_lookup():
    """Test get() by id."""
    roster = InMemoryRoster([Candidate(id="u1", label="A")])
    assert roster.get("u1") == Candidate(id="u1", label="A")
    assert roster.get("nope") is None


def test_yaml_roster_reload():
    """Test reading and reloading from disk."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "team.yaml"
        roster = YamlRoster(path)
        assert roster.candidates() == []

        path.write_text("- {id: u1, label: Alice}\n")
        roster.reload()
        assert [c.id for c in roster.candidates()] == ["u1"]
        assert roster.get("u1").label == "Alice"


@pytest.mark.parametrize(
    "entry",
    ["{id: u1, label: 'Ops [EU]'}", "{id: u1, label: 'A]B'}", "{id: 'u)1', label: A}", "{id: u1, label: ''}"],
)
def test_parse_rejects_unencodable_entries(entry):
    """Test that labels and ids the token grammar cannot hold are refused."""
    with pytest.raises(RosterError, match="entry 1"):
        parse_roster(f"- {{id: u0, label: Ok}}\n- {entry}\n")
