"""Minimal English singularization for association field names."""

import re

_IRREGULAR = {
    "people": "person",
    "men": "man",
    "women": "woman",
    "children": "child",
    "mice": "mouse",
    "geese": "goose",
    "feet": "foot",
    "teeth": "tooth",
}

_UNCOUNTABLE = {"data", "equipment", "information", "news", "series", "species", "sheep", "fish"}

_RULES = [
    (re.compile(r"(quiz)zes$"), r"\1"),
    (re.compile(r"(matri|vert|ind)ices$"), r"\1ix"),
    (re.compile(r"(alias|status|bus)es$"), r"\1"),
    (re.compile(r"(x|ch|ss|sh)es$"), r"\1"),
    (re.compile(r"(m)ovies$"), r"\1ovie"),
    (re.compile(r"([^aeiouy]|qu)ies$"), r"\1y"),
    (re.compile(r"(hive)s$"), r"\1"),
    (re.compile(r"([lr])ves$"), r"\1f"),
    (re.compile(r"([^f])ves$"), r"\1fe"),
    (re.compile(r"(ss|us)$"), r"\1"),
    (re.compile(r"s$"), ""),
]


def singularize(word: str) -> str:
    """
    Singularize the last underscore-separated segment of ``word``.

    Example:
        >>> singularize("favorite_cheeses")
        'favorite_cheese'
    """
    head, sep, last = word.rpartition("_")
    lowered = last.lower()
    if lowered in _UNCOUNTABLE:
        return word
    if lowered in _IRREGULAR:
        return f"{head}{sep}{_IRREGULAR[lowered]}"
    for pattern, replacement in _RULES:
        if pattern.search(last):
            return f"{head}{sep}{pattern.sub(replacement, last, count=1)}"
    return word
