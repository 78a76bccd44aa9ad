"""Read-only rendering helpers for stored notes."""

from ..core.grammar import scan_tokens
from ..core.model import Range, Span


def split_spans(storage_text: str) -> list[Span]:
    """Split storage text into plain-text and mention spans.

    Spans cover the input end to end, in order. Empty text spans between
    adjacent mentions are dropped.
    """
    spans: list[Span] = []
    i = 0
    for m in scan_tokens(storage_text):
        if m.start > i:
            spans.append(
                Span(kind="text", text=storage_text[i:m.start], range=Range(i, m.start))
            )
        spans.append(
            Span(
                kind="mention",
                text=storage_text[m.start:m.end],
                label=m.label,
                id=m.id,
                range=Range(m.start, m.end),
            )
        )
        i = m.end
    if i < len(storage_text):
        spans.append(
            Span(kind="text", text=storage_text[i:], range=Range(i, len(storage_text)))
        )
    return spans
