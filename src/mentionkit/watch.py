"""Watch mode for mentionkit - reload the roster file when it changes."""

import json
import signal
import sys
import time
from pathlib import Path
from threading import Event, Thread
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class RosterChangeHandler(FileSystemEventHandler):
    """Debounced handler for changes to a single roster file."""

    def __init__(self, roster_path: Path, on_change: Callable[[], None], debounce_ms: int = 150):
        super().__init__()
        self.roster_path = roster_path
        self.on_change = on_change
        self.debounce_ms = debounce_ms

        self.pending = False
        self.last_event_time = 0.0

    def _is_roster(self, path: Path) -> bool:
        return path.name == self.roster_path.name

    def _touch(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [Path(str(event.src_path))]
        # Editors often save via rename onto the target
        dest = getattr(event, "dest_path", None)
        if dest:
            paths.append(Path(str(dest)))
        if any(self._is_roster(p) for p in paths):
            self.pending = True
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        self._touch(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._touch(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._touch(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._touch(event)

    def check_and_flush(self) -> None:
        """Flush if the debounce period has elapsed."""
        if not self.pending:
            return
        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        if not self.pending:
            return
        self.pending = False
        self.on_change()


class RosterWatcher:
    """Observer plus a polling thread that flushes debounced reloads."""

    def __init__(self, path: Path, on_change: Callable[[], None], debounce_ms: int = 150):
        self.handler = RosterChangeHandler(path, on_change, debounce_ms)
        self.observer = Observer()
        self.observer.schedule(self.handler, str(path.parent.resolve()), recursive=False)
        self._stop = Event()
        self._thread = Thread(target=self._poll, daemon=True)

    def _poll(self) -> None:
        while not self._stop.wait(0.1):
            self.handler.check_and_flush()

    def start(self) -> None:
        self.observer.start()
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join()
        self.handler.flush()
        self.observer.stop()
        self.observer.join()


def watch_roster(
    roster: Any,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the roster file and reload it on change until interrupted.

    Args:
        roster: YamlRoster instance
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    path = Path(roster.path)
    if not path.parent.exists():
        print(f"Error: Roster directory not found: {path.parent}", file=sys.stderr)
        return 1

    running = True

    def reload() -> None:
        start_time = time.time()
        try:
            roster.reload()
            duration_ms = int((time.time() - start_time) * 1000)
            count = len(roster.candidates())
            if json_output:
                print(json.dumps({"type": "reload", "candidates": count, "duration_ms": duration_ms}), flush=True)
            elif not quiet:
                print(f"Reloaded roster: {count} candidates ({duration_ms}ms)", flush=True)
        except Exception as e:
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    watcher = RosterWatcher(path, reload, debounce_ms)

    if not quiet and not json_output:
        print(f"Watching {path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    watcher.start()

    try:
        while running:
            time.sleep(0.1)
    finally:
        watcher.stop()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
