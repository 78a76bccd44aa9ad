from typing import Callable, Sequence

from ..core.model import Candidate, Mode
from ..core.ports import CandidateSource, ChangeListener, Scheduler
from ..format.convert import to_display
from .session import (
    ComposeOptions,
    Transition,
    initial_state,
    on_click_outside,
    on_input,
    on_key,
    on_select,
)


def _run_now(callback: Callable[[], None]) -> None:
    callback()


class MentionEditor:
    """Host-facing wrapper around the composer state machine.

    Owns one :class:`EditorState`, forwards every storage change to
    ``on_change`` and defers caret placement through ``schedule``.
    """

    def __init__(
        self,
        roster: CandidateSource,
        on_change: ChangeListener,
        set_caret: Callable[[int], None] | None = None,
        schedule: Scheduler = _run_now,
        options: ComposeOptions = ComposeOptions(),
        storage_text: str = "",
    ):
        self.roster = roster
        self.on_change = on_change
        self.set_caret = set_caret
        self.schedule = schedule
        self.options = options
        self.state = initial_state(storage_text)

    @property
    def storage_text(self) -> str:
        return self.state.storage_text

    @property
    def display_text(self) -> str:
        return to_display(self.state.storage_text)

    @property
    def composing(self) -> bool:
        return self.state.mode is Mode.COMPOSING

    @property
    def suggestions(self) -> Sequence[Candidate]:
        return self.state.suggestions

    def load(self, storage_text: str) -> None:
        """Replace the note being edited; composition resets to idle."""
        self.state = initial_state(storage_text)

    def input(self, new_display: str, caret: int) -> None:
        self._apply(
            on_input(self.state, new_display, caret, self.roster.candidates(), self.options)
        )

    def key(self, key: str) -> bool:
        """Feed a key press; True when the host must suppress its default."""
        return self._apply(on_key(self.state, key, self.options))

    def select(self, candidate: Candidate) -> None:
        self._apply(on_select(self.state, candidate, self.options))

    def click_outside(self) -> None:
        self._apply(on_click_outside(self.state))

    def _apply(self, transition: Transition) -> bool:
        self.state = transition.state
        if transition.change is not None:
            self.on_change(transition.change.storage_text, transition.change.referenced_ids)
        if transition.caret_request is not None and self.set_caret is not None:
            caret = transition.caret_request
            set_caret = self.set_caret
            self.schedule(lambda: set_caret(caret))
        return transition.handled
