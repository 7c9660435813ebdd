import pytest

from crawler.rng import choice, make_rng, shuffled
from crawler.text import a_an, count_phrase, describe_items, join_words, pluralize, tally, to_the, word_number


@pytest.mark.parametrize("noun,plural", [
    ("key", "keys"),
    ("potion of healing", "potions of healing"),
    ("wasp-man", "wasp-men"),
    ("box", "boxes"),
    ("ruby", "rubies"),
    ("dwarf", "dwarves"),
])
def test_pluralize(noun, plural):
    assert pluralize(noun) == plural


def test_tally_and_describe():
    assert tally(["a key", "a lamp", "a key"]) == ["two keys", "a lamp"]
    assert describe_items(["a key", "a lamp", "a key"]) == "two keys and a lamp"
    assert describe_items([]) == "nothing"
    assert count_phrase(3, "some gold") == "some gold"


def test_small_helpers():
    assert join_words(["a", "b", "c"]) == "a, b and c"
    assert a_an("orb") == "an orb"
    assert a_an("key") == "a key"
    assert to_the("a chest in an alcove") == "the chest in the alcove"
    assert word_number("an") == 1
    assert word_number("four") == 4


def test_random_helpers_are_seeded():
    items = list(range(10))
    assert shuffled(make_rng(3), items) == shuffled(make_rng(3), items)
    assert sorted(shuffled(make_rng(3), items)) == items
    assert choice(make_rng(3), items) in items
