from typing import Callable, Protocol, Sequence
from .model import Candidate, CandidateId


class CandidateSource(Protocol):
    """
    Host-owned roster of mentionable entities. Read-only to the engine,
    refreshed by the host on its own schedule.
    """

    def candidates(self) -> Sequence[Candidate]:
        pass

    def get(self, id: CandidateId) -> Candidate | None:
        pass

    def reload(self) -> None:
        pass


class ChangeListener(Protocol):
    """
    Receives every new storage text plus the ids it references.
    """

    def __call__(self, storage_text: str, referenced_ids: list[CandidateId]) -> None:
        pass


class Scheduler(Protocol):
    """
    Runs a callback once, after the host's next paint.
    """

    def __call__(self, callback: Callable[[], None]) -> None:
        pass


class Renderer(Protocol):
    def render(self, storage_text: str) -> str:
        pass
