# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Bidirectional original/masked mapping table for one sanitize call."""

import logging
from collections.abc import Callable, Iterable

from sanitizer.classifier import classify
from sanitizer.model import Category, MappingEntry

logger = logging.getLogger(__name__)

STRING_TAG_FORMAT = "[[STR_{}]]"
COMMENT_TAG_FORMAT = "[[CMT_{}]]"

_STRING_COUNTER = "[[str]]"
_COMMENT_COUNTER = "[[cmt]]"


class MappingTable:
    """Own forward and backward maps plus per-prefix counters.

    A table is created empty for one sanitize call and handed out with its
    result; it is never shared between calls.
    """

    def __init__(
        self, taken_names: Iterable[str] = (), source_text: str = ""
    ) -> None:
        """Initialize empty maps and counters.

        Args:
            taken_names: Name spellings already present in the source; never
                minted as masked names.
            source_text: Source text; literal tags occurring in it are skipped.
        """
        self._taken_names: frozenset[str] = frozenset(taken_names)
        self._source_text = source_text
        self._forward: dict[str, str] = {}
        self._backward: dict[str, str] = {}
        self._categories: dict[str, Category | None] = {}
        self._counters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._backward)

    def __contains__(self, original: object) -> bool:
        return original in self._forward

    def lookup(self, original: str) -> str | None:
        """Return the masked value of an original, if mapped."""
        return self._forward.get(original)

    def original_for(self, masked: str) -> str | None:
        """Return the original behind a masked value or tag, if mapped."""
        return self._backward.get(masked)

    def get_or_create(self, original: str, category: Category) -> str:
        """Return the masked name for an original, minting it on first use.

        Args:
            original: Original identifier spelling.
            category: Definition category of the identifier.

        Returns:
            Masked name such as ``VAR_1``.
        """
        existing = self._forward.get(original)
        if existing is not None:
            return existing
        prefix = classify(original, category)
        masked = f"{prefix}_{self._next(prefix.lower())}"
        while masked in self._backward or masked in self._taken_names:
            masked = f"{prefix}_{self._next(prefix.lower())}"
        self._insert(original=original, masked=masked, category=category)
        return masked

    def mint_string_tag(
        self, original_text: str, wrap: Callable[[str], str]
    ) -> str:
        """Return the masked token for a string literal, minting it on first use.

        Args:
            original_text: Literal text including prefix and quotes.
            wrap: Builds the masked token around a freshly minted tag.

        Returns:
            Masked token, for example ``"[[STR_1]]"``.
        """
        existing = self._forward.get(original_text)
        if existing is not None:
            return existing
        tag = self._mint_tag(STRING_TAG_FORMAT, _STRING_COUNTER)
        masked = wrap(tag)
        self._forward[original_text] = masked
        self._backward[tag] = original_text
        self._categories[tag] = None
        return masked

    def mint_comment_tag(self, inner_content: str) -> str:
        """Mint a new comment tag storing the comment's inner content.

        Args:
            inner_content: Comment text without its delimiters.

        Returns:
            Tag such as ``[[CMT_1]]``.
        """
        tag = self._mint_tag(COMMENT_TAG_FORMAT, _COMMENT_COUNTER)
        self._backward[tag] = inner_content
        self._categories[tag] = None
        return tag

    def entries(self) -> list[MappingEntry]:
        """List all entries in insertion order."""
        return [
            MappingEntry(original=original, masked=masked, category=self._categories[masked])
            for masked, original in self._backward.items()
        ]

    def as_mapping(self) -> dict[str, str]:
        """Return the externally visible masked-to-original mapping."""
        return dict(self._backward)

    def _insert(self, original: str, masked: str, category: Category) -> None:
        self._forward[original] = masked
        self._backward[masked] = original
        self._categories[masked] = category

    def _next(self, counter_key: str) -> int:
        value = self._counters.get(counter_key, 0) + 1
        self._counters[counter_key] = value
        return value

    def _mint_tag(self, tag_format: str, counter_key: str) -> str:
        tag = tag_format.format(self._next(counter_key))
        while tag in self._backward or tag in self._source_text:
            tag = tag_format.format(self._next(counter_key))
        return tag
