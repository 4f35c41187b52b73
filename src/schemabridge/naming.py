"""Naming conventions: pluralize, singularize and case-convert identifiers.

Follows the framework's English inflection closely enough for table and
model names. Compound names (``OrderItem``, ``order_items``) are inflected
on their last word only.
"""

import re
from typing import List, Tuple

UNCOUNTABLE = {
    "audio",
    "cattle",
    "data",
    "deer",
    "equipment",
    "feedback",
    "fish",
    "information",
    "media",
    "metadata",
    "money",
    "news",
    "rice",
    "series",
    "sheep",
    "software",
    "species",
    "staff",
}

IRREGULAR: List[Tuple[str, str]] = [
    ("person", "people"),
    ("man", "men"),
    ("woman", "women"),
    ("child", "children"),
    ("mouse", "mice"),
    ("goose", "geese"),
    ("tooth", "teeth"),
    ("foot", "feet"),
    ("ox", "oxen"),
    ("criterion", "criteria"),
    ("phenomenon", "phenomena"),
]

PLURAL_RULES: List[Tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"(matr)ix$", r"\1ices"),
    (r"(vert|ind)ex$", r"\1ices"),
    (r"(alias|status|bus|campus|virus)$", r"\1es"),
    (r"(x|ch|ss|sh|z)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(kni|wi|li)fe$", r"\1ves"),
    (r"(wol|hal|shel|cal|sel|el|lea|loa|thie)f$", r"\1ves"),
    (r"(tomat|potat|her|ech)o$", r"\1oes"),
    (r"(analy|diagno|parenthe|progno|synop)sis$", r"\1ses"),
    (r"s$", "s"),
    (r"$", "s"),
]

SINGULAR_RULES: List[Tuple[str, str]] = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(alias|status|bus|campus|virus)es$", r"\1"),
    (r"(analy|diagno|parenthe|progno|synop)ses$", r"\1sis"),
    (r"(x|ch|ss|sh|z)es$", r"\1"),
    (r"(movie|cookie|tie|pie)s$", r"\1"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"(wol|hal|shel|cal|sel|el|lea|loa|thie)ves$", r"\1f"),
    (r"(kni|wi|li)ves$", r"\1fe"),
    (r"(tomat|potat|her|ech)oes$", r"\1o"),
    (r"(ss|us|is)$", r"\1"),
    (r"s$", ""),
]

_WORD_SPLIT = re.compile(r"[\s_\-]+")


def _split_last_word(value: str) -> Tuple[str, str]:
    """Split an identifier into (prefix, last word) for inflection."""
    match = re.search(r"([A-Z]?[a-z0-9]+|[A-Z]+)$", value)
    if not match:
        return "", value
    return value[: match.start()], match.group(1)


def _match_case(original: str, inflected: str) -> str:
    if original.isupper() and len(original) > 1:
        return inflected.upper()
    if original[:1].isupper():
        return inflected[:1].upper() + inflected[1:]
    return inflected


def _inflect_word(word: str, to_plural: bool) -> str:
    lower = word.lower()
    if lower in UNCOUNTABLE:
        return word
    for singular_form, plural_form in IRREGULAR:
        source, target = (singular_form, plural_form) if to_plural else (plural_form, singular_form)
        if lower == source:
            return _match_case(word, target)
        if lower == target:
            return word
    rules = PLURAL_RULES if to_plural else SINGULAR_RULES
    for pattern, replacement in rules:
        if re.search(pattern, lower):
            return _match_case(word, re.sub(pattern, replacement, lower, count=1))
    return word


def pluralize(value: str) -> str:
    """Plural form of an identifier, e.g. ``category`` -> ``categories``."""
    if not value:
        return value
    prefix, word = _split_last_word(value)
    return prefix + _inflect_word(word, to_plural=True)


def singularize(value: str) -> str:
    """Singular form of an identifier, e.g. ``OrderItems`` -> ``OrderItem``."""
    if not value:
        return value
    prefix, word = _split_last_word(value)
    return prefix + _inflect_word(word, to_plural=False)


def is_singular(word: str) -> bool:
    return singularize(word) == word


def studly(value: str) -> str:
    """``order_items`` -> ``OrderItems``."""
    return "".join(part[:1].upper() + part[1:] for part in _WORD_SPLIT.split(value) if part)


def snake(value: str) -> str:
    """``OrderItem`` -> ``order_item``; already snake-cased names are kept."""
    if not value:
        return value
    value = re.sub(r"[\s\-]+", "_", value.strip())
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    return re.sub(r"_+", "_", value).lower()


def entity_name(table_name: str) -> str:
    """Model name for a storage table: ``order_items`` -> ``OrderItem``."""
    return singularize(studly(table_name))


def table_name_for(entity: str) -> str:
    """Storage table for a model name: ``OrderItem`` -> ``order_items``."""
    return snake(pluralize(entity))


def foreign_key_for(entity: str) -> str:
    """Conventional foreign key column: ``OrderItem`` -> ``order_item_id``."""
    return f"{snake(singularize(entity))}_id"


def table_from_foreign_key(column_name: str) -> str:
    """Guess the referenced table from a column: ``user_id`` -> ``users``."""
    if column_name.endswith("_id"):
        return pluralize(column_name[: -len("_id")])
    return column_name
