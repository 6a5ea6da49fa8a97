"""Dice key space: five six-sided dice read as a base-10 literal."""

from __future__ import annotations

import itertools
import math
from typing import Iterator, Sequence


NDICE = 5
SIDES = 6
WORDLIST_SIZE = SIDES ** NDICE  # 7776

MIN_KEY = 11111
MAX_KEY = 66666

BITS_PER_WORD = math.log2(WORDLIST_SIZE)


def dice_to_key(rolls: Sequence[int]) -> int:
    """Encode die rolls as a key, first roll as the most significant digit.

    Digits are read in base 10, not base 6, so keys are sparse in 11111..66666.
    Raises ValueError if the roll count or any face is out of range.
    """
    if len(rolls) != NDICE:
        raise ValueError(f"Expected {NDICE} dice, got {len(rolls)}.")
    key = 0
    for roll in rolls:
        if not 1 <= roll <= SIDES:
            raise ValueError(f"Die roll out of range 1-{SIDES}: {roll}")
        key = key * 10 + roll
    return key


def is_valid_key(key: int) -> bool:
    """True if key has exactly five digits, each in 1-6."""
    if not isinstance(key, int) or not MIN_KEY <= key <= MAX_KEY:
        return False
    return all("1" <= digit <= str(SIDES) for digit in str(key))


def all_keys() -> Iterator[int]:
    """Yield every valid key in ascending order."""
    for rolls in itertools.product(range(1, SIDES + 1), repeat=NDICE):
        yield dice_to_key(rolls)

