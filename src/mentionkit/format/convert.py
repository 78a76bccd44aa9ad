"""Conversion between storage text and display text."""

from ..core.extract import extract
from ..core.grammar import encode_token, scan_tokens


def to_display(storage_text: str) -> str:
    """Collapse every ``@[label](id)`` token to ``@label``.

    Args:
        storage_text: Persisted note body

    Returns:
        Text suitable for a plain text-input control
    """
    result = []
    i = 0
    for m in scan_tokens(storage_text):
        result.append(storage_text[i:m.start])
        result.append("@" + m.label)
        i = m.end
    result.append(storage_text[i:])
    return "".join(result)


def to_storage(old_storage: str, old_display: str, new_display: str) -> str:
    """Rebuild storage text after the user edited the display text.

    References from ``old_storage`` whose ``@label`` survives in
    ``new_display`` get their token back; the rest stay as plain text. Longer
    labels are restored first so that a short label that is a prefix of a
    longer one cannot claim the longer one's text. Labels of equal length
    resolve to the first remaining occurrence.

    Args:
        old_storage: Storage text before the edit
        old_display: Display text before the edit (kept for the host contract)
        new_display: Display text after the edit

    Returns:
        New storage text
    """
    mentions = extract(old_storage)
    if not mentions:
        return new_display

    # Working result as segments; str entries are still plain display text,
    # tuples are restored tokens that later searches must skip.
    segments: list[str | tuple[str]] = [new_display]

    for mention in sorted(mentions, key=lambda m: len(m.label), reverse=True):
        display_form = mention.display_form
        for idx, seg in enumerate(segments):
            if isinstance(seg, tuple):
                continue
            hit = seg.find(display_form)
            if hit == -1:
                continue
            token = encode_token(mention.label, mention.id)
            segments[idx:idx + 1] = [
                seg[:hit],
                (token,),
                seg[hit + len(display_form):],
            ]
            break

    return "".join(seg[0] if isinstance(seg, tuple) else seg for seg in segments)
