# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Collect defining occurrences of names from a parsed source."""

import logging
from dataclasses import dataclass
from typing import Any

from sanitizer.classifier import is_masked_name
from sanitizer.model import Category, DefinitionOccurrence, SanitizeOptions
from sanitizer.queries import DEFINITION_QUERIES, IMPORT_QUERIES, is_identifier_node
from sanitizer.syntax import ParsedSource, QueryConstructionError, SyntaxProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefinitionIndex:
    """Represent the definitions and external names of one source.

    Args:
        definitions: Eligible defining occurrences in source order.
        external_symbols: Names bound by import statements.
        source_identifiers: Every name spelling that occurs in the source.
    """

    definitions: tuple[DefinitionOccurrence, ...]
    external_symbols: frozenset[str]
    source_identifiers: frozenset[str]


def collect_definitions(
    provider: SyntaxProvider,
    parsed: ParsedSource,
    options: SanitizeOptions,
    reserved: frozenset[str],
) -> DefinitionIndex:
    """Run the definition and import queries and filter eligible names.

    Args:
        provider: Syntax provider used to run queries.
        parsed: Parsed source.
        options: Sanitize options selecting categories and name length.
        reserved: Names exempt from masking.

    Returns:
        Eligible definitions and external symbols.

    Raises:
        QueryConstructionError: If no query is registered or one fails to compile.
    """
    definition_query = DEFINITION_QUERIES.get(parsed.query_key)
    if definition_query is None:
        raise QueryConstructionError(
            f"No definition query for language family: {parsed.query_key}"
        )
    external_symbols = _collect_external_symbols(provider, parsed)

    occurrences: list[DefinitionOccurrence] = []
    captures = provider.captures(parsed, definition_query)
    for capture_name, nodes in captures.items():
        category = Category.from_capture(capture_name)
        if not options.masks(category):
            continue
        for node in nodes:
            text = parsed.text_of(node)
            if not _is_eligible(text, options, reserved, external_symbols):
                continue
            occurrences.append(
                DefinitionOccurrence(
                    text=text,
                    category=category,
                    span=(node.start_byte, node.end_byte),
                )
            )

    occurrences.sort(key=lambda occurrence: occurrence.span)
    logger.debug(
        f"Collected definitions (language_id={parsed.language_id} "
        f"definitions={len(occurrences)} external={len(external_symbols)})"
    )
    return DefinitionIndex(
        definitions=tuple(_dedupe_spans(occurrences)),
        external_symbols=frozenset(external_symbols),
        source_identifiers=_collect_identifier_spellings(parsed),
    )


def _collect_external_symbols(
    provider: SyntaxProvider, parsed: ParsedSource
) -> set[str]:
    """Collect names bound by import statements.

    Args:
        provider: Syntax provider used to run the query.
        parsed: Parsed source.

    Returns:
        Import-bound names.
    """
    import_query = IMPORT_QUERIES.get(parsed.query_key)
    if import_query is None:
        return set()
    captures = provider.captures(parsed, import_query)
    return {parsed.text_of(node) for node in captures.get("import", [])}


def _collect_identifier_spellings(parsed: ParsedSource) -> frozenset[str]:
    """Collect the text of every name token in the source.

    Args:
        parsed: Parsed source.

    Returns:
        Distinct name spellings, used to keep minted names collision-free.
    """
    spellings: set[str] = set()
    stack: list[Any] = [parsed.root_node]
    while stack:
        node = stack.pop()
        if is_identifier_node(node):
            spellings.add(parsed.text_of(node))
            continue
        stack.extend(node.children)
    return frozenset(spellings)


def _dedupe_spans(
    occurrences: list[DefinitionOccurrence],
) -> list[DefinitionOccurrence]:
    """Keep the first occurrence per span when patterns overlap."""
    seen: set[tuple[int, int]] = set()
    unique: list[DefinitionOccurrence] = []
    for occurrence in occurrences:
        if occurrence.span in seen:
            continue
        seen.add(occurrence.span)
        unique.append(occurrence)
    return unique


def _is_eligible(
    name: str,
    options: SanitizeOptions,
    reserved: frozenset[str],
    external_symbols: set[str],
) -> bool:
    """Check whether a defined name may be masked.

    Args:
        name: Defined name.
        options: Sanitize options carrying the minimum length.
        reserved: Names exempt from masking.
        external_symbols: Import-bound names.

    Returns:
        True when the name should be masked.
    """
    if len(name) < options.min_name_length:
        return False
    if name.startswith("_"):
        return False
    if name in reserved or name in external_symbols:
        return False
    if is_masked_name(name):
        return False
    return True
