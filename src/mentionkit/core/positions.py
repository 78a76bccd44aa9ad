"""Offset translation between storage and display coordinates.

Every reference collapses from ``@[label](id)`` in storage to ``@label`` in
display, so offsets past a reference shift by the difference of the two
lengths. A caret can never sit inside a collapsed reference: positions that
land strictly inside one snap to its trailing edge.

Both walks are linear in the number of references, which stays in the tens
for a single note.
"""

from typing import Sequence

from .extract import extract
from .model import Range, ReferenceOccurrence


def _clamp(pos: int, length: int) -> int:
    return max(0, min(pos, length))


def display_length(
    storage_text: str,
    occurrences: Sequence[ReferenceOccurrence] | None = None,
) -> int:
    """Length of the display text without building it."""
    if occurrences is None:
        occurrences = extract(storage_text)
    shrink = sum(o.storage_len - o.display_len for o in occurrences)
    return len(storage_text) - shrink


def display_ranges(occurrences: Sequence[ReferenceOccurrence]) -> list[Range]:
    """Span of each reference's ``@label`` in display space."""
    ranges = []
    offset = 0
    for o in occurrences:
        start = o.storage_start - offset
        ranges.append(Range(start, start + o.display_len))
        offset += o.storage_len - o.display_len
    return ranges


def storage_to_display(
    storage_text: str,
    pos: int,
    occurrences: Sequence[ReferenceOccurrence] | None = None,
) -> int:
    """Map a storage offset to the display offset the user sees.

    Args:
        storage_text: Current storage text
        pos: Offset into storage_text; clamped to its bounds
        occurrences: Pre-extracted references, to skip re-scanning

    Returns:
        Display offset. Inside a token this is the end of its ``@label``.
    """
    if occurrences is None:
        occurrences = extract(storage_text)
    pos = _clamp(pos, len(storage_text))

    offset = 0
    for o in occurrences:
        if pos <= o.storage_start:
            break
        if pos <= o.storage_end:
            # Inside (or at the end of) a token
            return o.storage_start - offset + o.display_len
        offset += o.storage_len - o.display_len

    return pos - offset


def display_to_storage(
    storage_text: str,
    pos: int,
    occurrences: Sequence[ReferenceOccurrence] | None = None,
) -> int:
    """Map a display offset back into storage text.

    Args:
        storage_text: Current storage text (display text is derived from it)
        pos: Offset into the display text; clamped to its bounds
        occurrences: Pre-extracted references, to skip re-scanning

    Returns:
        Storage offset. Inside a collapsed ``@label`` this is the token end.
    """
    if occurrences is None:
        occurrences = extract(storage_text)
    pos = _clamp(pos, display_length(storage_text, occurrences))

    offset = 0
    for o in occurrences:
        display_start = o.storage_start - offset
        if pos <= display_start:
            break
        if pos <= display_start + o.display_len:
            return o.storage_end
        offset += o.storage_len - o.display_len

    return pos + offset
