"""Word list parsing and validation.

A diceware word list is a sequence of ``number word`` pairs separated by
whitespace, for example::

    11111 abacus
    11112 abdomen
    11113 ...

A complete list has exactly 7776 pairs. Parsing stops at the end of input or
at the first pair that cannot be read; how it stopped decides which error is
reported when fewer than 7776 pairs were accepted.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple, TextIO

from diceware_db.errors import DicewareIOError, IncompleteWordListError, InvalidFormatError
from diceware_db.keys import WORDLIST_SIZE, is_valid_key

logger = logging.getLogger(__name__)

MAX_WORD_BYTES = 63

_INTEGER = re.compile(r"[+-]?[0-9]+")


class Entry(NamedTuple):
    """One word list row: a dice key and its word."""

    key: int
    word: str


class ParseResult(NamedTuple):
    """Accepted pairs and the reason reading stopped."""

    entries: list[Entry]
    exhausted: bool
    bad_token: str | None = None


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def _word_ok(token: str) -> bool:
    return bool(token) and len(token.encode("utf-8")) <= MAX_WORD_BYTES


def read_pairs(stream: TextIO, limit: int | None = None) -> ParseResult:
    """Read (integer, word) pairs from stream until end of input or a malformed pair.

    Pairs need not be one per line. Stops early after limit pairs.
    """
    entries: list[Entry] = []
    tokens = _tokens(stream)
    while limit is None or len(entries) < limit:
        key_token = next(tokens, None)
        if key_token is None:
            return ParseResult(entries, exhausted=True)
        if not _INTEGER.fullmatch(key_token):
            return ParseResult(entries, exhausted=False, bad_token=key_token)
        word = next(tokens, None)
        if word is None:
            return ParseResult(entries, exhausted=True)
        if not _word_ok(word):
            return ParseResult(entries, exhausted=False, bad_token=word)
        entries.append(Entry(int(key_token), word))
    return ParseResult(entries, exhausted=False)


def _check_strict(entries: list[Entry], path: str) -> None:
    keys: set[int] = set()
    words: set[str] = set()
    for key, word in entries:
        if not is_valid_key(key):
            raise InvalidFormatError(f"invalid diceware key {key} in {path}")
        if key in keys:
            raise InvalidFormatError(f"duplicate diceware key {key} in {path}")
        if word in words:
            raise InvalidFormatError(f"duplicate word '{word}' in {path}")
        keys.add(key)
        words.add(word)


def parse_and_validate(path: str | Path, strict: bool = False) -> list[Entry]:
    """Parse a word list file and check that it holds exactly 7776 entries.

    Raises DicewareIOError if the file cannot be read,
    IncompleteWordListError if input ends before 7776 entries, and
    InvalidFormatError if unreadable content comes first or the list is too long.
    Trailing content after the 7776th entry is ignored.

    With strict=True, keys must also be valid dice keys and keys and words
    must be unique.
    """
    path = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            result = read_pairs(f, limit=WORDLIST_SIZE + 1)
    except UnicodeDecodeError as e:
        raise InvalidFormatError(f"invalid diceware file: {path}: {e}") from e
    except OSError as e:
        raise DicewareIOError(f"cannot read word list {path}: {e.strerror or e}") from e

    count = len(result.entries)
    if count > WORDLIST_SIZE:
        raise InvalidFormatError(f"too many diceware entries: {path} (expected {WORDLIST_SIZE})")
    if count < WORDLIST_SIZE:
        if result.exhausted:
            raise IncompleteWordListError(
                f"too few diceware entries: {path} ({count} of {WORDLIST_SIZE})"
            )
        raise InvalidFormatError(
            f"invalid diceware file: {path}: unreadable entry {result.bad_token!r} after {count} entries"
        )
    if strict:
        _check_strict(result.entries, path)
    logger.debug("parsed %d entries from %s", count, path)
    return result.entries


def load_into(store, entries: Iterable[Entry]) -> int:
    """Insert entries into the store's open bulk load. Returns the number inserted.

    Committing or rolling back is left to the store.
    """
    count = 0
    for entry in entries:
        store.insert(entry.key, entry.word)
        count += 1
    logger.debug("inserted %d entries", count)
    return count
