import re

from ..core.extract import extract
from ..core.model import TriggerState
from ..core.positions import display_ranges, display_to_storage

TRIGGER = "@"

# "@" plus word characters, anchored at the caret
_ASCII_TRIGGER_RE = re.compile(r"@(\w*)\Z", re.ASCII)
_UNICODE_TRIGGER_RE = re.compile(r"@(\w*)\Z")


def detect_trigger(
    display_text: str,
    caret: int,
    storage_text: str | None = None,
    *,
    unicode_words: bool = False,
) -> TriggerState:
    """Decide whether the caret sits in an in-progress mention.

    Args:
        display_text: Current display text
        caret: Caret offset in display space; clamped to the text
        storage_text: Storage text behind display_text. When given, an "@"
            inside an existing mention does not count as a trigger and
            the trigger start is also reported in storage space.
        unicode_words: Accept any Unicode word character in the partial
            label instead of ASCII letters, digits and underscore only

    Returns:
        TriggerState; inactive when no trigger precedes the caret
    """
    caret = max(0, min(caret, len(display_text)))
    before = display_text[:caret]
    pattern = _UNICODE_TRIGGER_RE if unicode_words else _ASCII_TRIGGER_RE
    m = pattern.search(before)
    if m is None:
        return TriggerState.inactive()

    display_start = m.start()
    storage_start = display_start

    if storage_text is not None:
        occurrences = extract(storage_text)
        for r in display_ranges(occurrences):
            if r.start <= display_start < r.end:
                # That "@" belongs to a mention, not to a new composition
                return TriggerState.inactive()
            if r.start > display_start:
                break
        storage_start = display_to_storage(storage_text, display_start, occurrences)

    return TriggerState(
        active=True,
        partial_label=m.group(1),
        trigger_storage_start=storage_start,
        trigger_display_start=display_start,
    )
