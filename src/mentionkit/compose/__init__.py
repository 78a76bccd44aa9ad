"""Mention composition: trigger detection, matching, insertion, state machine."""

from .editor import MentionEditor
from .insert import insert_reference
from .matcher import MAX_SUGGESTIONS, match_candidates
from .session import (
    ComposeOptions,
    Transition,
    initial_state,
    on_click_outside,
    on_input,
    on_key,
    on_select,
)
from .trigger import detect_trigger

__all__ = [
    "MentionEditor",
    "insert_reference",
    "match_candidates",
    "MAX_SUGGESTIONS",
    "ComposeOptions",
    "Transition",
    "initial_state",
    "on_click_outside",
    "on_input",
    "on_key",
    "on_select",
    "detect_trigger",
]
