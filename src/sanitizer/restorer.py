# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Restore original source text from sanitized text and its mapping."""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from sanitizer.edits import TextEdit, apply_edits
from sanitizer.literals import string_content
from sanitizer.queries import (
    COMMENT_NODE_TYPES,
    STRING_NODE_TYPES,
    is_identifier_node,
)
from sanitizer.syntax import SanitizerError, SyntaxProvider

logger = logging.getLogger(__name__)

MappingInput = str | bytes | Mapping[str, str] | Iterable[tuple[str, str]]

TAG_PATTERN = r"\[\[(?:STR|CMT)_\d+\]\]"
_TAG_RE = re.compile(TAG_PATTERN)
_TAG_KEY_RE = re.compile(rf"^{TAG_PATTERN}$")


class InvalidMappingFormatError(SanitizerError):
    """Represent a mapping argument that is not a flat string-to-string object."""


class RestoreMode(str, Enum):
    """Restoration strategy."""

    TAGS = "tags"
    STRUCTURAL = "structural"


def parse_mapping(mapping: MappingInput) -> dict[str, str]:
    """Normalize a mapping argument into a masked-to-original dict.

    Args:
        mapping: JSON text, mapping object or iterable of pairs.

    Returns:
        Flat masked-to-original mapping.

    Raises:
        InvalidMappingFormatError: If the mapping is not valid JSON or not a
            flat object of strings.
    """
    loaded: object
    if isinstance(mapping, (str, bytes)):
        try:
            loaded = json.loads(mapping)
        except json.JSONDecodeError as exc:
            logger.warning(f"Mapping is not valid JSON (error={exc})")
            raise InvalidMappingFormatError(f"Mapping is not valid JSON: {exc}") from exc
    elif isinstance(mapping, Mapping):
        loaded = dict(mapping)
    else:
        try:
            loaded = dict(mapping)
        except (TypeError, ValueError) as exc:
            raise InvalidMappingFormatError(f"Mapping is not a set of pairs: {exc}") from exc

    if not isinstance(loaded, dict):
        raise InvalidMappingFormatError(
            f"Mapping must be a JSON object, got {type(loaded).__name__}"
        )
    for key, value in loaded.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidMappingFormatError(
                f"Mapping entries must be strings (key={key!r})"
            )
    return loaded


def restore_tags(code: str, backward: Mapping[str, str]) -> str:
    """Restore text by pattern matching on tags and masked names.

    Literal tags come first in the alternation, so a masked name that shares
    its spelling with a tag's inner text never splits a tag. Each span is
    replaced once; restored text is not rescanned.

    Args:
        code: Sanitized text, possibly reformatted.
        backward: Masked-to-original mapping.

    Returns:
        Restored text. Unknown tokens are left unchanged.
    """
    identifier_keys = sorted(
        (key for key in backward if key and not _TAG_KEY_RE.match(key)),
        key=len,
        reverse=True,
    )
    pattern = TAG_PATTERN
    if identifier_keys:
        alternation = "|".join(re.escape(key) for key in identifier_keys)
        pattern = rf"{TAG_PATTERN}|(?<![\w$])(?:{alternation})(?![\w$])"
    token_re = re.compile(pattern)
    return token_re.sub(lambda match: _restore_token(match.group(0), backward), code)


def _restore_literal_tags(text: str, backward: Mapping[str, str]) -> str:
    return _TAG_RE.sub(lambda match: _restore_token(match.group(0), backward), text)


def _restore_token(token: str, backward: Mapping[str, str]) -> str:
    """Resolve one matched token; string tags yield only the literal content."""
    original = backward.get(token)
    if original is None:
        return token
    if token.startswith("[[STR_"):
        return string_content(original)
    return original


def restore_structural(
    code: str,
    backward: Mapping[str, str],
    language_id: str,
    provider: SyntaxProvider | None = None,
) -> str:
    """Restore text by re-parsing it and replacing mapped nodes.

    Args:
        code: Sanitized text that is still parseable.
        backward: Masked-to-original mapping.
        language_id: Editor language id used to parse the text.
        provider: Optional syntax provider to reuse loaded grammars.

    Returns:
        Restored text.

    Raises:
        UnsupportedLanguageError: If the language id is not registered.
        ParserInitError: If the grammar cannot be loaded.
    """
    parsed = (provider or SyntaxProvider()).parse(code, language_id)
    string_types = STRING_NODE_TYPES.get(parsed.query_key, frozenset())
    edits: list[TextEdit] = []
    stack: list[Any] = [parsed.root_node]
    while stack:
        node = stack.pop()
        if node.type in COMMENT_NODE_TYPES or node.type in string_types:
            text = parsed.text_of(node)
            if _TAG_RE.search(text):
                restored = _restore_literal_tags(text, backward)
                edits.append(TextEdit(node.start_byte, node.end_byte, restored))
                continue
            if node.type in COMMENT_NODE_TYPES:
                continue
        if is_identifier_node(node):
            original = backward.get(parsed.text_of(node))
            if original is not None:
                edits.append(TextEdit(node.start_byte, node.end_byte, original))
            continue
        stack.extend(reversed(node.children))
    return apply_edits(parsed.source, edits).decode("utf-8")


def restore_with_map(
    code: str,
    mapping: MappingInput,
    language_id: str | None = None,
    mode: RestoreMode | str = RestoreMode.TAGS,
    provider: SyntaxProvider | None = None,
) -> str:
    """Reconstruct original text from sanitized text and its mapping.

    Args:
        code: Sanitized text.
        mapping: Masked-to-original mapping as JSON text, mapping or pairs.
        language_id: Editor language id; required for structural mode.
        mode: Restoration strategy.
        provider: Optional syntax provider for structural mode.

    Returns:
        Restored text.

    Raises:
        InvalidMappingFormatError: If the mapping cannot be parsed.
        ValueError: If structural mode is requested without a language id.
    """
    backward = parse_mapping(mapping)
    resolved_mode = RestoreMode(mode)
    if resolved_mode is RestoreMode.STRUCTURAL:
        if not language_id:
            raise ValueError("language_id is required for structural restoration")
        restored = restore_structural(code, backward, language_id, provider)
    else:
        restored = restore_tags(code, backward)
    logger.info(
        f"Restore completed (mode={resolved_mode.value} entries={len(backward)})"
    )
    return restored
