"""Exception types raised by the word store, the word list loader and the generator."""

from __future__ import annotations


class DicewareError(Exception):
    """Base class for all diceware_db failures."""


class DicewareIOError(DicewareError, OSError):
    """A file could not be opened or read."""


class StoreError(DicewareError):
    """The database engine rejected an operation."""


class StoreFormatError(StoreError):
    """Schema creation failed, or the file does not hold a usable word table."""


class StoreBusyError(StoreError):
    """The store stayed locked for longer than the configured retry bound."""


class RollbackError(StoreError):
    """Rolling back a failed bulk load failed. The store may be inconsistent."""


class WordNotFoundError(DicewareError):
    """No word is stored under the requested key."""

    def __init__(self, key: int, message: str | None = None):
        self.key = key
        super().__init__(message or f"incomplete database: no word for key {key}")


class IncompleteStoreError(WordNotFoundError):
    """The store does not cover the whole key space."""

    def __init__(self, missing: list[int]):
        self.missing = missing
        preview = ", ".join(str(k) for k in missing[:5])
        if len(missing) > 5:
            preview += ", ..."
        super().__init__(
            missing[0],
            f"incomplete database: {len(missing)} keys missing ({preview})",
        )


class WordListError(DicewareError):
    """The word list is not a complete diceware list."""


class IncompleteWordListError(WordListError):
    """Input ended before all entries were read."""


class InvalidFormatError(WordListError):
    """Input contains content that is not an (integer, word) pair."""
