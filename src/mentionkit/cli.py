"""CLI for mentionkit - mention-aware note text tools."""

import argparse
import json
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .compose.insert import insert_reference
from .compose.matcher import match_candidates
from .compose.trigger import detect_trigger
from .core.extract import extract, extract_ids
from .core.positions import display_to_storage, storage_to_display
from .format.convert import to_display
from .format.render import split_spans
from .lint import lint_text
from .notify import build_mention_notifications
from .runtime import build_runtime


def _read(source: str) -> str:
    """Read note text from a path, or stdin for '-'."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def cmd_display(args: argparse.Namespace, rt: Any) -> int:
    """Print display text."""
    text = to_display(_read(args.file))
    if args.json:
        print(json.dumps({"display": text}, indent=2))
    else:
        sys.stdout.write(text)
    return 0


def cmd_extract(args: argparse.Namespace, rt: Any) -> int:
    """List references with their storage spans."""
    occurrences = extract(_read(args.file))
    if args.json:
        print(json.dumps([
            {"label": o.label, "id": o.id, "start": o.storage_start, "end": o.storage_end}
            for o in occurrences
        ], indent=2))
    else:
        for o in occurrences:
            print(f"{o.storage_start}\t{o.storage_end}\t{o.id}\t{o.label}")
    return 0


def cmd_ids(args: argparse.Namespace, rt: Any) -> int:
    """Print referenced ids in order."""
    ids = extract_ids(_read(args.file))
    if args.unique:
        ids = list(dict.fromkeys(ids))
    if args.json:
        print(json.dumps(ids))
    else:
        for cid in ids:
            print(cid)
    return 0


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Render a note for read-only display."""
    text = _read(args.file)
    if args.html:
        print(rt.renderer.render(text))
    elif args.json:
        print(json.dumps([
            {"kind": s.kind, "text": s.text, "label": s.label, "id": s.id}
            for s in split_spans(text)
        ], indent=2))
    else:
        for span in split_spans(text):
            if span.kind == "mention":
                print(f"[mention {span.id}] @{span.label}")
            else:
                print(f"[text] {span.text!r}")
    return 0


def cmd_pos(args: argparse.Namespace, rt: Any) -> int:
    """Translate an offset between storage and display space."""
    text = _read(args.file)
    if args.storage is not None:
        result = {"storage": args.storage, "display": storage_to_display(text, args.storage)}
    else:
        result = {"display": args.display, "storage": display_to_storage(text, args.display)}
    if args.json:
        print(json.dumps(result))
    else:
        print(f"storage={result['storage']} display={result['display']}")
    return 0


def cmd_trigger(args: argparse.Namespace, rt: Any) -> int:
    """Report whether the caret is composing a mention."""
    text = _read(args.file)
    state = detect_trigger(
        to_display(text), args.caret, text,
        unicode_words=rt.config.compose.unicode_words,
    )
    suggestions = []
    if state.active:
        suggestions = match_candidates(
            rt.roster.candidates(), state.partial_label,
            limit=rt.config.compose.max_suggestions,
        )
    if args.json:
        print(json.dumps({
            "active": state.active,
            "partial_label": state.partial_label,
            "trigger_storage_start": state.trigger_storage_start,
            "trigger_display_start": state.trigger_display_start,
            "suggestions": [{"id": c.id, "label": c.label} for c in suggestions],
        }, indent=2))
    elif not state.active:
        print("idle")
    else:
        print(f"composing @{state.partial_label} (display {state.trigger_display_start}, storage {state.trigger_storage_start})")
        for c in suggestions:
            print(f"  {c.id}\t{c.label}")
    return 0


def cmd_suggest(args: argparse.Namespace, rt: Any) -> int:
    """Filter the roster by a partial label."""
    limit = args.limit if args.limit is not None else rt.config.compose.max_suggestions
    matches = match_candidates(rt.roster.candidates(), args.query, limit=limit)
    if args.json:
        print(json.dumps([
            {"id": c.id, "label": c.label, "avatar_url": c.avatar_url, "role": c.role}
            for c in matches
        ], indent=2))
    else:
        for c in matches:
            role = f"\t{c.role}" if c.role else ""
            print(f"{c.id}\t{c.label}{role}")
    return 0


def cmd_insert(args: argparse.Namespace, rt: Any) -> int:
    """Insert a reference at the caret."""
    candidate = rt.roster.get(args.id)
    if candidate is None:
        print(f"Error: Candidate {args.id} not found", file=sys.stderr)
        return 1

    text = _read(args.file)
    result = insert_reference(
        text, args.caret, candidate,
        unicode_words=rt.config.compose.unicode_words,
    )

    if args.in_place:
        if args.file == "-":
            print("Error: --in-place needs a file path", file=sys.stderr)
            return 1
        Path(args.file).write_text(result.storage_text, encoding="utf-8")
        if not args.quiet:
            print(f"caret={result.display_caret}")
    elif args.json:
        print(json.dumps({
            "storage": result.storage_text,
            "caret": result.display_caret,
            "ids": extract_ids(result.storage_text),
        }, indent=2))
    else:
        sys.stdout.write(result.storage_text)
        if not args.quiet:
            print(f"\ncaret={result.display_caret}", file=sys.stderr)
    return 0


def cmd_lint(args: argparse.Namespace, rt: Any) -> int:
    """Check notes for broken tokens and unknown references."""
    errors = 0
    report = []
    for source in args.files:
        for rule_id, finding in lint_text(_read(source), rt.roster):
            if finding.severity == "error":
                errors += 1
            start = finding.range.start if finding.range else None
            report.append({
                "file": source,
                "rule": rule_id,
                "severity": finding.severity,
                "message": finding.message,
                "start": start,
            })

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        for item in report:
            print(f"{item['file']}:{item['start']}: [{item['severity']}] {item['rule']}: {item['message']}")
        if not args.quiet:
            print(f"{len(report)} finding(s), {errors} error(s)")
    return 1 if errors else 0


def cmd_notify(args: argparse.Namespace, rt: Any) -> int:
    """Print mention notification payloads for a note."""
    notifications = build_mention_notifications(
        _read(args.file),
        entity_type=args.entity_type,
        entity_id=args.entity_id,
        routes=rt.config.notifications.routes,
        default_route=rt.config.notifications.default_route,
        author_id=args.author,
    )
    print(json.dumps(notifications, indent=2))
    return 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Reload the roster whenever its file changes."""
    try:
        from .watch import watch_roster
    except ImportError as e:
        print(
            "Error: watchdog not installed. Install with: pip install mentionkit[watch]",
            file=sys.stderr,
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    return watch_roster(
        rt.roster,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install mentionkit[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.api.host
    port = args.port or rt.config.api.port

    watcher = None
    if args.watch_roster:
        from .watch import RosterWatcher

        watcher = RosterWatcher(Path(rt.roster.path), rt.roster.reload)
        watcher.start()

    print(f"Starting server on http://{host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        if watcher is not None:
            watcher.stop()

    return 0


def _version_string() -> str:
    return (
        f"mentionkit {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mention", description="Mention-aware note text tools"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/mention.toml, roster dir)",
    )
    parser.add_argument(
        "--roster",
        type=Path,
        default=None,
        help="Path to YAML roster of mentionable entities (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # display command
    parser_display = subparsers.add_parser("display", help="Print display text")
    parser_display.add_argument("file", help="Note file in storage form ('-' for stdin)")

    # extract command
    parser_extract = subparsers.add_parser("extract", help="List references and spans")
    parser_extract.add_argument("file", help="Note file ('-' for stdin)")

    # ids command
    parser_ids = subparsers.add_parser("ids", help="Print referenced ids")
    parser_ids.add_argument("file", help="Note file ('-' for stdin)")
    parser_ids.add_argument(
        "--unique", action="store_true", help="Drop repeated ids"
    )

    # render command
    parser_render = subparsers.add_parser("render", help="Render for read-only display")
    parser_render.add_argument("file", help="Note file ('-' for stdin)")
    parser_render.add_argument("--html", action="store_true", help="Output HTML")

    # pos command
    parser_pos = subparsers.add_parser("pos", help="Translate an offset")
    parser_pos.add_argument("file", help="Note file ('-' for stdin)")
    pos_group = parser_pos.add_mutually_exclusive_group(required=True)
    pos_group.add_argument("--storage", type=int, help="Storage offset to translate")
    pos_group.add_argument("--display", type=int, help="Display offset to translate")

    # trigger command
    parser_trigger = subparsers.add_parser("trigger", help="Detect mention composition at caret")
    parser_trigger.add_argument("file", help="Note file ('-' for stdin)")
    parser_trigger.add_argument("--caret", type=int, required=True, help="Display caret offset")

    # suggest command
    parser_suggest = subparsers.add_parser("suggest", help="Match roster entries")
    parser_suggest.add_argument("query", help="Partial label")
    parser_suggest.add_argument(
        "--limit", type=int, default=None, help="Maximum results (default: from config)"
    )

    # insert command
    parser_insert = subparsers.add_parser("insert", help="Insert a reference at the caret")
    parser_insert.add_argument("file", help="Note file ('-' for stdin)")
    parser_insert.add_argument("--caret", type=int, required=True, help="Display caret offset")
    parser_insert.add_argument("--id", required=True, help="Roster id to reference")
    parser_insert.add_argument(
        "--in-place", dest="in_place", action="store_true", help="Rewrite the file"
    )

    # lint command
    parser_lint = subparsers.add_parser("lint", help="Validate references")
    parser_lint.add_argument("files", nargs="+", help="Note files")

    # notify command
    parser_notify = subparsers.add_parser("notify", help="Build mention notifications")
    parser_notify.add_argument("file", help="Note file ('-' for stdin)")
    parser_notify.add_argument("--entity-type", dest="entity_type", required=True)
    parser_notify.add_argument("--entity-id", dest="entity_id", required=True)
    parser_notify.add_argument("--author", default=None, help="Author id (not notified)")

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Reload roster on change")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument(
        "--host", default=None,
        help="Host to bind to (default: from config, 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=None,
        help="Port to bind to (default: from config, 8766)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )
    parser_serve.add_argument(
        "--watch-roster", dest="watch_roster", action="store_true",
        help="Reload the roster file when it changes"
    )

    args = parser.parse_args()

    handlers = {
        "display": cmd_display,
        "extract": cmd_extract,
        "ids": cmd_ids,
        "render": cmd_render,
        "pos": cmd_pos,
        "trigger": cmd_trigger,
        "suggest": cmd_suggest,
        "insert": cmd_insert,
        "lint": cmd_lint,
        "notify": cmd_notify,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    try:
        rt = build_runtime(config_path=args.config, roster_path=args.roster)
        exit_code = handler(args, rt)
        sys.exit(exit_code)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
