from typing import Iterable

from ..core.grammar import is_encodable
from ..core.model import Candidate

MAX_SUGGESTIONS = 5


def match_candidates(
    candidates: Iterable[Candidate],
    partial_label: str,
    limit: int = MAX_SUGGESTIONS,
) -> list[Candidate]:
    """Case-insensitive substring filter over candidate labels.

    Input order is kept among matches; at most ``limit`` are returned.
    Candidates whose label or id cannot form a token are never offered.
    """
    if limit <= 0:
        return []
    needle = partial_label.lower()
    out: list[Candidate] = []
    for candidate in candidates:
        if needle in candidate.label.lower() and is_encodable(candidate.label, candidate.id):
            out.append(candidate)
            if len(out) >= limit:
                break
    return out
