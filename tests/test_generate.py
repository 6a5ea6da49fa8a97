"""Tests for passphrase generation."""

import math
from collections import Counter
from unittest.mock import MagicMock, patch

import pytest

from diceware_db.errors import StoreFormatError, WordNotFoundError
from diceware_db.generate import draw_key, entropy_bits, generate, roll_dice
from diceware_db.keys import WORDLIST_SIZE, all_keys, is_valid_key


def _key_of(word):
    return {"alpha": 11111, "bravo": 11112}.get(word) or int(word[1:])


def test_generate_returns_requested_word_count(memory_store, full_entries):
    loaded = {word for _, word in full_entries}
    for n in (1, 2, 4, 10):
        passphrase = generate(memory_store, n)
        assert passphrase.endswith("\n")
        assert passphrase.count("\n") == 1
        words = passphrase[:-1].split(" ")
        assert len(words) == n
        assert all(w in loaded for w in words)


def test_generate_zero_words_is_just_newline(memory_store):
    assert generate(memory_store, 0) == "\n"


def test_generate_rejects_negative_count(memory_store):
    with pytest.raises(ValueError, match="must not be negative"):
        generate(memory_store, -1)


def test_generate_maps_rolls_to_words(memory_store):
    rolls = [0, 0, 0, 0, 0] + [0, 0, 0, 0, 1]
    with patch("diceware_db.generate.secrets.randbelow", side_effect=rolls) as mock_randbelow:
        assert generate(memory_store, 2) == "alpha bravo\n"
    assert mock_randbelow.call_count == 10
    assert all(c.args == (6,) for c in mock_randbelow.call_args_list)


def test_first_roll_is_most_significant_digit():
    with patch("diceware_db.generate.secrets.randbelow", side_effect=[2, 3, 0, 5, 1]):
        assert draw_key() == 34162


def test_roll_dice_faces_in_range():
    for _ in range(1000):
        rolls = roll_dice()
        assert len(rolls) == 5
        assert all(1 <= r <= 6 for r in rolls)


def test_draw_key_is_valid():
    for _ in range(1000):
        assert is_valid_key(draw_key())


def test_lookup_failure_aborts_whole_passphrase():
    store = MagicMock()
    store.lookup.side_effect = ["alpha", WordNotFoundError(12345), "charlie"]
    with pytest.raises(WordNotFoundError, match="12345"):
        generate(store, 3)
    assert store.lookup.call_count == 2


def test_generate_on_unbuilt_store_propagates(tmp_path):
    from diceware_db.store import WordStore

    with WordStore.open(tmp_path / "empty.db") as store:
        with pytest.raises(StoreFormatError):
            generate(store, 4)


def test_entropy_bits():
    assert entropy_bits(0) == 0
    assert entropy_bits(1) == pytest.approx(math.log2(7776))
    assert entropy_bits(4) == pytest.approx(51.7, abs=0.01)


def test_words_are_uniformly_distributed(memory_store):
    """Chi-square goodness of fit over single-word passphrases."""
    per_key = 10
    samples = WORDLIST_SIZE * per_key
    counts = Counter(_key_of(generate(memory_store, 1).strip()) for _ in range(samples))

    assert set(counts) <= set(all_keys())
    chi2 = sum((counts.get(k, 0) - per_key) ** 2 / per_key for k in all_keys())
    dof = WORDLIST_SIZE - 1
    # chi2 has mean dof and variance 2*dof; 6 sigma keeps false failures negligible
    assert abs(chi2 - dof) < 6 * math.sqrt(2 * dof)
