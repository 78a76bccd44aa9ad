"""Storage/display conversion for mention-bearing notes."""

from .convert import to_display, to_storage
from .render import split_spans

__all__ = [
    "to_display",
    "to_storage",
    "split_spans",
]
