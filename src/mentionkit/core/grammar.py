"""Token grammar for embedded references.

A reference is stored inline as ``@[label](id)``:

- ``label`` is one or more characters, none of them ``[`` or ``]``
- ``id`` is one or more characters, none of them ``)``

This module is the only recogniser of that syntax. Extraction, projection,
injection, rendering and lint all go through :func:`scan_tokens` or
:func:`match_token_at`.
"""

from dataclasses import dataclass
from typing import Iterator

OPEN = "@["
LABEL_OPEN = "["
LABEL_CLOSE = "]"
ID_OPEN = "("
ID_CLOSE = ")"


class GrammarError(ValueError):
    """Raised when a label or id cannot be encoded as a token."""


@dataclass(frozen=True)
class TokenMatch:
    label: str
    id: str
    start: int
    end: int


def encode_token(label: str, id: str) -> str:
    """Build the storage form of a reference.

    Raises:
        GrammarError: if the label or id is empty, or contains a character
            that would end or reopen it early.
    """
    if not label:
        raise GrammarError("Reference label must not be empty")
    for char in (LABEL_OPEN, LABEL_CLOSE):
        if char in label:
            raise GrammarError(f"Reference label may not contain '{char}': {label!r}")
    if not id:
        raise GrammarError("Reference id must not be empty")
    if ID_CLOSE in id:
        raise GrammarError(f"Reference id may not contain '{ID_CLOSE}': {id!r}")
    return f"{OPEN}{label}{LABEL_CLOSE}{ID_OPEN}{id}{ID_CLOSE}"


def is_encodable(label: str, id: str) -> bool:
    try:
        encode_token(label, id)
    except GrammarError:
        return False
    return True


class _Finder:
    """Memoised ``str.find`` for one delimiter character.

    The scanner only ever asks for delimiters at or after a position that
    never moves backwards, so the last answer stays valid until the search
    start passes it. Each character is therefore inspected at most once.
    """

    def __init__(self, text: str, char: str):
        self.text = text
        self.char = char
        self.pos = -1  # last hit; -1 = nothing cached
        self.exhausted = False

    def next_from(self, start: int) -> int:
        if self.exhausted:
            return -1
        if self.pos < start:
            self.pos = self.text.find(self.char, start)
            if self.pos == -1:
                self.exhausted = True
        return self.pos


def _match(
    text: str, pos: int, opens: _Finder, labels: _Finder, ids: _Finder
) -> TokenMatch | None:
    # State 1: "@["
    if text[pos:pos + 2] != OPEN:
        return None

    # State 2: label up to the first "]"
    label_start = pos + 2
    label_end = labels.next_from(label_start)
    if label_end == -1 or label_end == label_start:
        return None
    # A "[" inside the label means an inner "@[" may start the real token
    nested = opens.next_from(label_start)
    if nested != -1 and nested < label_end:
        return None

    # State 3: "(" straight after "]"
    id_start = label_end + 2
    if text[label_end + 1:id_start] != ID_OPEN:
        return None

    # State 4: id up to the first ")"
    id_end = ids.next_from(id_start)
    if id_end == -1 or id_end == id_start:
        return None

    return TokenMatch(
        label=text[label_start:label_end],
        id=text[id_start:id_end],
        start=pos,
        end=id_end + 1,
    )


def match_token_at(text: str, pos: int) -> TokenMatch | None:
    """Return the token starting exactly at ``pos``, if there is one."""
    if pos < 0 or pos >= len(text):
        return None
    return _match(
        text, pos,
        _Finder(text, LABEL_OPEN), _Finder(text, LABEL_CLOSE), _Finder(text, ID_CLOSE),
    )


def scan_tokens(text: str) -> Iterator[TokenMatch]:
    """Yield every well-formed token, left to right, without overlap.

    The first valid match at a position wins; a failed attempt resumes one
    character later. Anything that is not a complete token is plain text.
    """
    opens = _Finder(text, LABEL_OPEN)
    labels = _Finder(text, LABEL_CLOSE)
    ids = _Finder(text, ID_CLOSE)
    i = text.find("@")
    while i != -1:
        m = _match(text, i, opens, labels, ids)
        if m is not None:
            yield m
            i = text.find("@", m.end)
        else:
            i = text.find("@", i + 1)
