from dataclasses import dataclass
from typing import Protocol

from .core.extract import extract
from .core.grammar import OPEN, scan_tokens
from .core.model import Range
from .core.ports import CandidateSource


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    range: Range | None = None


class LintRule(Protocol):
    id: str

    def check(self, storage_text: str, roster: CandidateSource) -> list[Finding]:
        pass


class BrokenTokenRule:
    """An "@[" that never completes a token renders as plain text."""

    id = "broken-token"

    def check(self, storage_text: str, roster: CandidateSource) -> list[Finding]:
        out: list[Finding] = []
        covered = [(m.start, m.end) for m in scan_tokens(storage_text)]
        pos = storage_text.find(OPEN)
        while pos != -1:
            if not any(start <= pos < end for start, end in covered):
                line_end = storage_text.find("\n", pos)
                end = len(storage_text) if line_end == -1 else line_end
                out.append(
                    Finding(
                        "warn",
                        f"Incomplete reference {storage_text[pos:end]!r}",
                        Range(pos, end),
                    )
                )
            pos = storage_text.find(OPEN, pos + 1)
        return out


class UnknownReferenceRule:
    id = "unknown-reference"

    def check(self, storage_text: str, roster: CandidateSource) -> list[Finding]:
        out: list[Finding] = []
        for o in extract(storage_text):
            if roster.get(o.id) is None:
                out.append(
                    Finding(
                        "error",
                        f"Unknown id {o.id} for @{o.label}",
                        Range(o.storage_start, o.storage_end),
                    )
                )
        return out


class AmbiguousLabelRule:
    """Same label for different ids: edits may swap their identities."""

    id = "ambiguous-label"

    def check(self, storage_text: str, roster: CandidateSource) -> list[Finding]:
        out: list[Finding] = []
        seen: dict[str, str] = {}
        for o in extract(storage_text):
            first = seen.setdefault(o.label, o.id)
            if first != o.id:
                out.append(
                    Finding(
                        "warn",
                        f"@{o.label} refers to both {first} and {o.id}",
                        Range(o.storage_start, o.storage_end),
                    )
                )
        return out


DEFAULT_RULES: list[LintRule] = [
    BrokenTokenRule(),
    UnknownReferenceRule(),
    AmbiguousLabelRule(),
]


def lint_text(
    storage_text: str,
    roster: CandidateSource,
    rules: list[LintRule] | None = None,
) -> list[tuple[str, Finding]]:
    """Run every rule; returns (rule id, finding) pairs."""
    results = []
    for rule in rules if rules is not None else DEFAULT_RULES:
        for finding in rule.check(storage_text, roster):
            results.append((rule.id, finding))
    return results
