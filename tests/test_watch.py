"""Tests for watch mode functionality."""

import tempfile
import time
from pathlib import Path

import pytest

try:
    from watchdog.events import FileModifiedEvent, FileMovedEvent

    from mentionkit.watch import RosterChangeHandler, RosterWatcher
    WATCHDOG_AVAILABLE = True
except ImportError:
    WATCHDOG_AVAILABLE = False

from mentionkit.adapters.yaml_roster import YamlRoster


@pytest.mark.skipif(not WATCHDOG_AVAILABLE, reason="watchdog not installed")
def test_handler_ignores_other_files():
    """Test that only the roster file marks a reload as pending."""
    calls = []
    handler = RosterChangeHandler(Path("/tmp/team.yaml"), lambda: calls.append(1), debounce_ms=0)

    handler.on_modified(FileModifiedEvent("/tmp/notes.txt"))
    assert handler.pending is False

    handler.on_modified(FileModifiedEvent("/tmp/team.yaml"))
    assert handler.pending is True
    handler.check_and_flush()
    assert calls == [1]
    assert handler.pending is False


@pytest.mark.skipif(not WATCHDOG_AVAILABLE, reason="watchdog not installed")
def test_handler_sees_rename_onto_roster():
    """Test an atomic save that renames a temp file over the roster."""
    calls = []
    handler = RosterChangeHandler(Path("/tmp/team.yaml"), lambda: calls.append(1))

    handler.on_moved(FileMovedEvent("/tmp/.team.yaml.swp", "/tmp/team.yaml"))
    assert handler.pending is True


@pytest.mark.skipif(not WATCHDOG_AVAILABLE, reason="watchdog not installed")
def test_handler_debounces_bursts():
    """Test that a burst of events reloads once."""
    calls = []
    handler = RosterChangeHandler(Path("/tmp/team.yaml"), lambda: calls.append(1), debounce_ms=10_000)

    for _ in range(5):
        handler.on_modified(FileModifiedEvent("/tmp/team.yaml"))
    handler.check_and_flush()
    assert calls == []

    handler.flush()
    handler.flush()
    assert calls == [1]


@pytest.mark.skipif(not WATCHDOG_AVAILABLE, reason="watchdog not installed")
def test_watcher_reloads_roster():
    """Test end-to-end reload after the roster file changes."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "team.yaml"
        path.write_text("- id: u1\n  label: Alice\n")
        roster = YamlRoster(path)
        assert len(roster.candidates()) == 1

        watcher = RosterWatcher(path, roster.reload, debounce_ms=50)
        watcher.start()
        try:
            time.sleep(0.2)
            path.write_text("- id: u1\n  label: Alice\n- id: u2\n  label: Bob\n")

            deadline = time.time() + 5
            while time.time() < deadline and len(roster.candidates()) != 2:
                time.sleep(0.05)
        finally:
            watcher.stop()

        assert [c.id for c in roster.candidates()] == ["u1", "u2"]
