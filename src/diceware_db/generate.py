"""Passphrase generation from a word store using the system CSPRNG."""

from __future__ import annotations

import logging
import secrets

from diceware_db.keys import BITS_PER_WORD, NDICE, SIDES, dice_to_key

logger = logging.getLogger(__name__)


def roll_dice() -> tuple[int, ...]:
    """Roll NDICE fair dice. Each face comes from secrets.randbelow, so rolls are independent."""
    return tuple(secrets.randbelow(SIDES) + 1 for _ in range(NDICE))


def draw_key() -> int:
    """Roll a fresh set of dice and return its key."""
    return dice_to_key(roll_dice())


def entropy_bits(word_count: int) -> float:
    """Entropy of a passphrase of word_count words drawn from a full store."""
    return word_count * BITS_PER_WORD


def generate(store, word_count: int) -> str:
    """Return word_count random words from store, space-separated and newline-terminated.

    Any lookup error propagates before anything is returned, so a failed run
    never yields a partial passphrase. word_count=0 gives just "\\n".
    """
    if word_count < 0:
        raise ValueError(f"Word count must not be negative, got {word_count}.")
    words = [store.lookup(draw_key()) for _ in range(word_count)]
    logger.debug("generated %d words (%.1f bits)", word_count, entropy_bits(word_count))
    return " ".join(words) + "\n"
