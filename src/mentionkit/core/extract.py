from .grammar import scan_tokens
from .model import CandidateId, ReferenceOccurrence


def extract(storage_text: str) -> list[ReferenceOccurrence]:
    """List every reference in storage text, in storage order.

    Total over all strings: broken or unterminated tokens are plain text.
    """
    return [
        ReferenceOccurrence(
            label=m.label,
            id=m.id,
            storage_start=m.start,
            storage_end=m.end,
        )
        for m in scan_tokens(storage_text)
    ]


def extract_ids(storage_text: str) -> list[CandidateId]:
    """Flat, order-preserving ids (duplicates kept)."""
    return [m.id for m in scan_tokens(storage_text)]
