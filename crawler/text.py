"""Small English helpers shared by the classifier, the compiler and the game loop."""
from __future__ import annotations
import re
from typing import Dict, Iterable, List

_NUMBER_WORDS = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
    "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen",
    "nineteen", "twenty",
]

_IRREGULAR_PLURALS = {
    "man": "men",
    "woman": "women",
    "knife": "knives",
    "wolf": "wolves",
    "elf": "elves",
    "dwarf": "dwarves",
    "thief": "thieves",
    "mouse": "mice",
    "foot": "feet",
    "tooth": "teeth",
    "child": "children",
    "die": "dice",
    "leaf": "leaves",
}

_ARTICLE = re.compile(r"^(?:an?|the)\s+", re.IGNORECASE)


def decapitalize(text: str) -> str:
    """Make only the first letter lower-case."""
    return text[:1].lower() + text[1:]


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def to_the(text: str) -> str:
    """Replace every standalone 'a'/'an' with 'the'."""
    return re.sub(r"\b[Aa]n?\b", "the", text)


def a_an(text: str) -> str:
    return f"an {text}" if text[:1].lower() in "aeiou" else f"a {text}"


def strip_article(text: str) -> str:
    return _ARTICLE.sub("", text.strip())


def number_word(n: int) -> str:
    if 0 <= n < len(_NUMBER_WORDS):
        return _NUMBER_WORDS[n]
    return str(n)


def word_number(word: str) -> int:
    """Inverse of number_word for small counts; 'a'/'an' count as one."""
    word = word.lower()
    if word in ("a", "an"):
        return 1
    if word in _NUMBER_WORDS:
        return _NUMBER_WORDS.index(word)
    return int(word) if word.isdigit() else 0


def _plural_word(word: str) -> str:
    prefix, dash, last = word.rpartition("-")
    lower = last.lower()
    if lower in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower]
    elif lower.endswith(("s", "x", "z", "ch", "sh")):
        plural = last + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = last[:-1] + "ies"
    else:
        plural = last + "s"
    return prefix + dash + plural


def pluralize(noun: str) -> str:
    """Pluralize a noun phrase without article: 'potion of healing' -> 'potions of healing'."""
    head, sep, tail = noun.partition(" of ")
    words = head.split(" ")
    words[-1] = _plural_word(words[-1])
    return " ".join(words) + sep + tail


def count_phrase(count: int, phrase: str) -> str:
    if count == 1 or phrase.lower().startswith("some "):
        return phrase
    return f"{number_word(count)} {pluralize(strip_article(phrase))}"


def tally(items: Iterable[str]) -> List[str]:
    """Group identical phrases keeping first-seen order: ['a key', 'a key'] -> ['two keys']."""
    counts: Dict[str, int] = {}
    for item in items:
        counts[item] = counts.get(item, 0) + 1
    return [count_phrase(n, item) for item, n in counts.items()]


def join_words(words: List[str]) -> str:
    if not words:
        return ""
    if len(words) == 1:
        return words[0]
    return ", ".join(words[:-1]) + " and " + words[-1]


def describe_items(items: Iterable[str]) -> str:
    return join_words(tally(items)) or "nothing"
