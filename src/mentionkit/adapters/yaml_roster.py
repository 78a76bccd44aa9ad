import io
from pathlib import Path
from typing import Any, Iterable, Sequence

import yaml

from ..core.grammar import GrammarError, encode_token
from ..core.model import Candidate, CandidateId
from ..core.ports import CandidateSource


class RosterError(ValueError):
    """Raised when a roster file cannot be turned into candidates."""


def _candidate_from(entry: Any, index: int) -> Candidate:
    if not isinstance(entry, dict):
        raise RosterError(f"Roster entry {index} is not a mapping")
    # Accept the member-table names as well (user_id / display_name)
    cid = entry.get("id", entry.get("user_id"))
    label = entry.get("label", entry.get("display_name"))
    if cid is None or label is None:
        raise RosterError(f"Roster entry {index} needs 'id' and 'label'")
    try:
        encode_token(str(label), str(cid))
    except GrammarError as e:
        raise RosterError(f"Roster entry {index}: {e}") from e
    return Candidate(
        id=str(cid),
        label=str(label),
        avatar_url=entry.get("avatar_url"),
        role=entry.get("role"),
    )


def parse_roster(text: str) -> list[Candidate]:
    data = yaml.safe_load(io.StringIO(text))
    if data is None:
        return []
    # Either a bare list or {"members": [...]}
    if isinstance(data, dict):
        if "members" not in data:
            raise RosterError("Roster mapping needs a 'members' list")
        data = data["members"] or []
    if not isinstance(data, list):
        raise RosterError("Roster must be a list of members")
    return [_candidate_from(entry, i) for i, entry in enumerate(data)]


def dump_roster(candidates: Iterable[Candidate]) -> str:
    rows = []
    for c in candidates:
        row: dict[str, Any] = {"id": c.id, "label": c.label}
        if c.avatar_url:
            row["avatar_url"] = c.avatar_url
        if c.role:
            row["role"] = c.role
        rows.append(row)
    buf = io.StringIO()
    yaml.safe_dump(rows, buf, sort_keys=False, allow_unicode=True)
    return buf.getvalue()


class InMemoryRoster(CandidateSource):
    def __init__(self, candidates: Iterable[Candidate] = ()):
        self._candidates = list(candidates)

    def candidates(self) -> Sequence[Candidate]:
        return list(self._candidates)

    def get(self, id: CandidateId) -> Candidate | None:
        for c in self._candidates:
            if c.id == id:
                return c
        return None

    def reload(self) -> None:
        return None


class YamlRoster(InMemoryRoster):
    """Roster read from a YAML file; a missing file is an empty roster."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        self.reload()

    def reload(self) -> None:
        if not self.path.exists():
            self._candidates = []
            return
        self._candidates = parse_roster(self.path.read_text(encoding="utf-8"))
