# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Classify defined names into semantic masking prefixes."""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from sanitizer.model import Category

logger = logging.getLogger(__name__)

BASE_PREFIXES: dict[Category, str] = {
    Category.VARIABLE: "VAR",
    Category.FUNCTION: "ACTION",
    Category.CLASS: "ENTITY",
    Category.TYPE: "TYPE",
}

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z]|\d|\b|_)|[A-Z]?[a-z]+|[A-Z]+|\d+")

_LIST_WORDS = frozenset({"list", "array", "items", "collection"})
_NON_PLURAL_WORDS = frozenset(
    {
        "props",
        "status",
        "alias",
        "canvas",
        "focus",
        "bus",
        "this",
        "class",
        "process",
        "access",
        "address",
        "success",
        "progress",
    }
)
_BOOL_WORDS = frozenset({"is", "has", "can", "should", "did", "will"})
_STR_WORDS = frozenset({"name", "title", "text", "str", "label", "message", "msg"})
_NUM_WORDS = frozenset(
    {"count", "index", "num", "size", "length", "amount", "price", "total"}
)
_ID_WORDS = frozenset({"id", "key", "code", "uuid"})
_HANDLER_WORDS = frozenset({"on", "handle"})
_HOOK_RE = re.compile(r"^use[A-Z0-9]")


@dataclass(frozen=True)
class NamingRule:
    """One naming-convention rule of the classifier.

    Args:
        name: Rule label used in logs and tests.
        predicate: Test applied to the original spelling.
        prefix: Prefix used when the predicate matches.
    """

    name: str
    predicate: Callable[[str], bool]
    prefix: str


def split_words(name: str) -> list[str]:
    """Split a camelCase or snake_case name into lowercase words.

    Args:
        name: Identifier spelling.

    Returns:
        Lowercase words in order.
    """
    return [word.lower() for word in _WORD_RE.findall(name)]


def _last_word(name: str) -> str:
    words = split_words(name)
    return words[-1] if words else ""


def _is_list_like(name: str) -> bool:
    word = _last_word(name)
    if word in _LIST_WORDS:
        return True
    return _is_plural(word)


def _is_plural(word: str) -> bool:
    if len(word) < 3 or not word.endswith("s"):
        return False
    if word in _NON_PLURAL_WORDS:
        return False
    return not word.endswith(("ss", "us", "is"))


def _has_prefix_word(name: str, words: frozenset[str]) -> bool:
    parts = split_words(name)
    return len(parts) >= 2 and parts[0] in words and name[: len(parts[0])].islower()


def _is_bool_like(name: str) -> bool:
    return _has_prefix_word(name, _BOOL_WORDS)


def _is_str_like(name: str) -> bool:
    return _last_word(name) in _STR_WORDS


def _is_num_like(name: str) -> bool:
    return _last_word(name) in _NUM_WORDS


def _is_id_like(name: str) -> bool:
    return _last_word(name) in _ID_WORDS


def _is_handler_like(name: str) -> bool:
    return _has_prefix_word(name, _HANDLER_WORDS)


def _is_hook_like(name: str) -> bool:
    return _HOOK_RE.match(name) is not None


def _is_props_definition(name: str) -> bool:
    return name.endswith("Props") and len(name) > len("Props")


def _is_props(name: str) -> bool:
    return name == "props"


NAMING_RULES: list[NamingRule] = [
    NamingRule(name="list", predicate=_is_list_like, prefix="LIST"),
    NamingRule(name="bool", predicate=_is_bool_like, prefix="BOOL"),
    NamingRule(name="str", predicate=_is_str_like, prefix="STR"),
    NamingRule(name="num", predicate=_is_num_like, prefix="NUM"),
    NamingRule(name="id", predicate=_is_id_like, prefix="ID"),
    NamingRule(name="handler", predicate=_is_handler_like, prefix="HANDLER"),
    NamingRule(name="hook", predicate=_is_hook_like, prefix="HOOK"),
    NamingRule(name="props_def", predicate=_is_props_definition, prefix="PROPS_DEF"),
    NamingRule(name="props", predicate=_is_props, prefix="PROPS"),
]

KNOWN_PREFIXES: frozenset[str] = frozenset(
    set(BASE_PREFIXES.values()) | {rule.prefix for rule in NAMING_RULES}
)

MASKED_NAME_RE = re.compile(
    r"^(?:"
    + "|".join(sorted(KNOWN_PREFIXES, key=len, reverse=True))
    + r")_\d+$"
)


def classify(original: str, category: Category) -> str:
    """Map a defined name and its category to a masking prefix.

    Args:
        original: Original spelling of the name.
        category: Definition category.

    Returns:
        Prefix tag such as ``VAR`` or ``HANDLER``.
    """
    for rule in NAMING_RULES:
        if rule.predicate(original):
            return rule.prefix
    return BASE_PREFIXES[category]


def is_masked_name(name: str) -> bool:
    """Check whether a name already looks like a generated masked name."""
    return MASKED_NAME_RE.match(name) is not None
