# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Split string literals and comments into delimiters and content."""

import logging
import re
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

CommentFlavor = Literal["line", "block", "doc"]

_STRING_PREFIX_RE = re.compile(r"^[A-Za-z]*")
_QUOTES: tuple[str, ...] = ('"""', "'''", '"', "'", "`")


@dataclass(frozen=True)
class StringParts:
    """Represent a string literal split around its content.

    Args:
        prefix: Literal prefix such as ``r`` or ``f``.
        delimiter: Opening and closing quote sequence.
        content: Text between the delimiters.
    """

    prefix: str
    delimiter: str
    content: str

    def wrap(self, body: str) -> str:
        """Wrap a replacement body in a normalized quote style.

        Plain single-line quoted literals use double quotes unless their
        content holds a double quote; every other literal keeps its own
        delimiter so the content stays valid inside it.
        """
        delimiter = self.delimiter
        if delimiter in ("'", '"') and '"' not in self.content and "\n" not in self.content:
            delimiter = '"'
        return f"{self.prefix}{delimiter}{body}{delimiter}"


@dataclass(frozen=True)
class CommentParts:
    """Represent a comment split around its content."""

    flavor: CommentFlavor
    opener: str
    content: str
    closer: str

    def wrap(self, body: str) -> str:
        """Re-emit the comment delimiters around a replacement body."""
        return f"{self.opener}{body}{self.closer}"


def split_string(text: str) -> StringParts | None:
    """Split a string literal into prefix, delimiter and content.

    Args:
        text: Literal source text.

    Returns:
        Literal parts, or None when the text is not a closed literal.
    """
    prefix_match = _STRING_PREFIX_RE.match(text)
    prefix = prefix_match.group(0) if prefix_match else ""
    body = text[len(prefix) :]
    for quote in _QUOTES:
        if body.startswith(quote) and body.endswith(quote) and len(body) >= 2 * len(quote):
            return StringParts(
                prefix=prefix,
                delimiter=quote,
                content=body[len(quote) : len(body) - len(quote)],
            )
    return None


def string_content(text: str) -> str:
    """Return the content of a stored literal, or the text when it is not one."""
    parts = split_string(text)
    if parts is None:
        return text
    return parts.content


def split_comment(text: str) -> CommentParts | None:
    """Classify a comment and split it into delimiters and content.

    Args:
        text: Comment source text.

    Returns:
        Comment parts, or None for an unrecognized comment form.
    """
    if text.startswith("#"):
        return CommentParts(flavor="line", opener="#", content=text[1:], closer="")
    if text.startswith("//"):
        return CommentParts(flavor="line", opener="//", content=text[2:], closer="")
    if text.startswith("/**") and text.endswith("*/") and len(text) >= 5:
        return CommentParts(
            flavor="doc", opener="/**", content=text[3:-2], closer="*/"
        )
    if text.startswith("/*") and text.endswith("*/") and len(text) >= 4:
        return CommentParts(
            flavor="block", opener="/*", content=text[2:-2], closer="*/"
        )
    return None
