"""Per-keystroke state machine for the mention composer.

The host keeps an :class:`EditorState` between events and feeds it, with the
event, to one of the transition functions below. Each returns a
:class:`Transition` holding the next state plus any effects for the host:

- ``change``: new storage text and referenced ids, to pass to ``onChange``
- ``caret_request``: display offset to place the caret at after the next paint
- ``handled``: the host should suppress the control's default key behaviour

States: ``IDLE`` -> ``COMPOSING`` when a trigger is typed; ``COMPOSING`` stays
while the partial label keeps matching and falls back to ``IDLE`` when it stops
matching, on Escape, on click-outside, or after an insertion. ``INSERTING`` is
transient and never visible in a returned state.
"""

from dataclasses import dataclass, replace
from typing import Sequence

from ..core.extract import extract_ids
from ..core.model import Candidate, Change, EditorState, Mode, TriggerState
from ..format.convert import to_display, to_storage
from .insert import insert_reference
from .matcher import MAX_SUGGESTIONS, match_candidates
from .trigger import detect_trigger

KEY_DOWN = "ArrowDown"
KEY_UP = "ArrowUp"
KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"


@dataclass(frozen=True)
class ComposeOptions:
    max_suggestions: int = MAX_SUGGESTIONS
    unicode_words: bool = False


@dataclass(frozen=True)
class Transition:
    state: EditorState
    change: Change | None = None
    caret_request: int | None = None
    handled: bool = False


def initial_state(storage_text: str = "") -> EditorState:
    return EditorState(storage_text=storage_text)


def _idle(state: EditorState, **changes) -> EditorState:
    return replace(
        state,
        mode=Mode.IDLE,
        trigger=TriggerState.inactive(),
        suggestions=(),
        selected=0,
        **changes,
    )


def on_input(
    state: EditorState,
    new_display: str,
    caret: int,
    candidates: Sequence[Candidate],
    options: ComposeOptions = ComposeOptions(),
) -> Transition:
    """Handle an edit of the display text."""
    old_display = to_display(state.storage_text)
    new_storage = to_storage(state.storage_text, old_display, new_display)
    change = Change(new_storage, extract_ids(new_storage))

    trigger = detect_trigger(
        new_display, caret, new_storage, unicode_words=options.unicode_words
    )
    if not trigger.active:
        return Transition(_idle(state, storage_text=new_storage, caret=caret), change)

    suggestions = match_candidates(
        candidates, trigger.partial_label, limit=options.max_suggestions
    )
    next_state = replace(
        state,
        storage_text=new_storage,
        mode=Mode.COMPOSING,
        trigger=trigger,
        suggestions=tuple(suggestions),
        selected=0,
        caret=caret,
    )
    return Transition(next_state, change)


def on_select(
    state: EditorState,
    candidate: Candidate,
    options: ComposeOptions = ComposeOptions(),
) -> Transition:
    """Insert ``candidate`` at the current trigger."""
    inserting = replace(state, mode=Mode.INSERTING)
    result = insert_reference(
        inserting.storage_text,
        inserting.caret,
        candidate,
        unicode_words=options.unicode_words,
    )
    change = Change(result.storage_text, extract_ids(result.storage_text))
    next_state = _idle(
        inserting, storage_text=result.storage_text, caret=result.display_caret
    )
    return Transition(next_state, change, caret_request=result.display_caret, handled=True)


def on_key(
    state: EditorState,
    key: str,
    options: ComposeOptions = ComposeOptions(),
) -> Transition:
    """Handle suggestion-list navigation keys.

    Escape closes the list but stays unhandled so the host keeps its
    default. Other keys besides arrows and Enter, and any key outside
    ``COMPOSING``, fall through unhandled.
    """
    if state.mode is not Mode.COMPOSING:
        return Transition(state)

    if key == KEY_ESCAPE:
        return Transition(_idle(state))

    if not state.suggestions:
        return Transition(state)

    last = len(state.suggestions) - 1
    if key == KEY_DOWN:
        return Transition(replace(state, selected=min(state.selected + 1, last)), handled=True)
    if key == KEY_UP:
        return Transition(replace(state, selected=max(state.selected - 1, 0)), handled=True)
    if key == KEY_ENTER:
        index = max(0, min(state.selected, last))
        return on_select(state, state.suggestions[index], options)

    return Transition(state)


def on_click_outside(state: EditorState) -> Transition:
    return Transition(_idle(state))
