from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

CandidateId = str


@dataclass(frozen=True)
class Range:
    start: int  # str offsets, half-open
    end: int


@dataclass(frozen=True)
class ReferenceOccurrence:
    label: str
    id: CandidateId
    storage_start: int
    storage_end: int

    @property
    def storage_len(self) -> int:
        return self.storage_end - self.storage_start

    @property
    def display_len(self) -> int:
        # "@" + label
        return len(self.label) + 1

    @property
    def display_form(self) -> str:
        return "@" + self.label


@dataclass(frozen=True)
class TriggerState:
    active: bool
    partial_label: str = ""
    trigger_storage_start: int = -1
    trigger_display_start: int = -1

    @classmethod
    def inactive(cls) -> "TriggerState":
        return cls(active=False)


@dataclass(frozen=True)
class Candidate:
    id: CandidateId
    label: str
    avatar_url: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class InsertResult:
    storage_text: str
    display_caret: int


@dataclass(frozen=True)
class Span:
    kind: str  # "text" | "mention"
    text: str  # raw storage slice
    label: str | None = None
    id: CandidateId | None = None
    range: Range | None = None


class Mode(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    INSERTING = "inserting"


@dataclass(frozen=True)
class EditorState:
    storage_text: str = ""
    mode: Mode = Mode.IDLE
    trigger: TriggerState = field(default_factory=TriggerState.inactive)
    suggestions: tuple[Candidate, ...] = ()
    selected: int = 0
    caret: int = 0  # display space


@dataclass(frozen=True)
class Change:
    storage_text: str
    referenced_ids: list[CandidateId]
