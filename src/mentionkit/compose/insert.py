from ..core.extract import extract
from ..core.grammar import encode_token
from ..core.model import Candidate, InsertResult
from ..core.positions import display_length, display_to_storage, storage_to_display
from ..format.convert import to_display
from .trigger import detect_trigger


def insert_reference(
    storage_text: str,
    display_caret: int,
    candidate: Candidate,
    *,
    unicode_words: bool = False,
) -> InsertResult:
    """Splice a reference to ``candidate`` in place of the trigger at the caret.

    The trigger ("@" plus partial label) before the caret is replaced by the
    full token and one trailing space. With no active trigger the reference
    is inserted at the caret.

    Args:
        storage_text: Current storage text
        display_caret: Caret offset in display space; clamped to the text
        candidate: Entity to reference
        unicode_words: Word-character class used to find the trigger

    Returns:
        New storage text and the display caret just after the inserted space

    Raises:
        GrammarError: if the candidate's label or id cannot form a token
    """
    token = encode_token(candidate.label, candidate.id)

    occurrences = extract(storage_text)
    caret = max(0, min(display_caret, display_length(storage_text, occurrences)))

    trigger = detect_trigger(
        to_display(storage_text),
        caret,
        storage_text,
        unicode_words=unicode_words,
    )
    start = trigger.trigger_display_start if trigger.active else caret

    storage_start = display_to_storage(storage_text, start, occurrences)
    storage_caret = display_to_storage(storage_text, caret, occurrences)
    # A caret inside a collapsed mention inserts after it
    display_start = storage_to_display(storage_text, storage_start, occurrences)

    new_storage = storage_text[:storage_start] + token + " " + storage_text[storage_caret:]
    # "@" + label + " "
    new_caret = display_start + len(candidate.label) + 2
    return InsertResult(storage_text=new_storage, display_caret=new_caret)
