import pytest

from diceware_db.keys import all_keys


def _format(entries, sep="\n"):
    return sep.join(f"{key} {word}" for key, word in entries) + "\n"


@pytest.fixture
def full_entries():
    """A complete list: 'alpha' and 'bravo' first, then w<key> for every other key."""
    entries = [(key, f"w{key}") for key in all_keys()]
    entries[0] = (11111, "alpha")
    entries[1] = (11112, "bravo")
    return entries


@pytest.fixture
def make_wordlist(tmp_path):
    """Write (key, word) pairs to a file and return its path."""

    def _make(entries, name="words.txt", sep="\n", trailer=""):
        path = tmp_path / name
        path.write_text(_format(entries, sep) + trailer)
        return path

    return _make


@pytest.fixture
def wordlist_file(make_wordlist, full_entries):
    return make_wordlist(full_entries)


@pytest.fixture
def memory_store(wordlist_file):
    from diceware_db.store import create_store

    store = create_store(":memory:", wordlist_file)
    yield store
    store.close()
