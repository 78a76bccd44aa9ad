"""mentionkit - mention-aware text encoding for note composers."""

__version__ = "0.1.0"
