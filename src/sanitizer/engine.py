# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Sanitize source code by masking defined names, literals and comments."""

import logging
from collections.abc import Mapping
from typing import Any

from sanitizer.collector import DefinitionIndex, collect_definitions
from sanitizer.edits import TextEdit, apply_edits
from sanitizer.literals import split_comment, split_string
from sanitizer.mapping import MappingTable
from sanitizer.model import SanitizeOptions, SanitizeResult, SourceUnit
from sanitizer.queries import (
    COMMENT_NODE_TYPES,
    IMPORT_REQUIRE_TYPE,
    IMPORT_STATEMENT_TYPES,
    INTERPOLATION_NODE_TYPES,
    KEYWORD_ARGUMENT_TYPE,
    MEMBER_ACCESS_FIELDS,
    MODULE_LOADER_CALLS,
    STRING_NODE_TYPES,
    is_identifier_node,
)
from sanitizer.reserved import build_reserved_set
from sanitizer.syntax import (
    ParsedSource,
    ParserInitError,
    QueryConstructionError,
    SyntaxProvider,
    UnsupportedLanguageError,
)

logger = logging.getLogger(__name__)

OptionsInput = SanitizeOptions | Mapping[str, object] | None


class _SanitizingWalker:
    """Walk a parsed source and collect masking edits."""

    def __init__(
        self,
        parsed: ParsedSource,
        table: MappingTable,
        index: DefinitionIndex,
        options: SanitizeOptions,
    ) -> None:
        """Initialize walker state.

        Args:
            parsed: Parsed source.
            table: Mapping table populated with definitions.
            index: Definition index carrying external symbols.
            options: Sanitize options.
        """
        self._parsed = parsed
        self._table = table
        self._external_symbols = index.external_symbols
        self._options = options
        self._string_types = STRING_NODE_TYPES.get(parsed.query_key, frozenset())
        self._member_fields = MEMBER_ACCESS_FIELDS.get(parsed.query_key)
        self.edits: list[TextEdit] = []
        self.identifiers_renamed: int = 0
        self.strings_masked: int = 0
        self.comments_masked: int = 0

    def walk(self) -> None:
        """Visit every node in source order, skipping masked subtrees."""
        stack: list[Any] = [self._parsed.root_node]
        while stack:
            node = stack.pop()
            node_type = node.type
            if node_type in COMMENT_NODE_TYPES:
                if self._options.remove_comments:
                    self._visit_comment(node)
                continue
            if node_type in self._string_types and self._options.mask_strings:
                if self._visit_string(node):
                    continue
            if is_identifier_node(node):
                self._visit_identifier(node)
                continue
            stack.extend(reversed(node.children))

    def _visit_identifier(self, node: Any) -> None:
        """Replace an identifier whose text is a mapped definition.

        Args:
            node: Identifier-class node.
        """
        text = self._parsed.text_of(node)
        masked = self._table.lookup(text)
        if masked is None:
            return
        if self._is_external_member(node) or self._is_foreign_keyword(node):
            return
        self.edits.append(TextEdit(node.start_byte, node.end_byte, masked))
        self.identifiers_renamed += 1

    def _visit_string(self, node: Any) -> bool:
        """Replace a string literal with its tag.

        Args:
            node: String literal node.

        Returns:
            True when the literal subtree was handled and must not be descended.
        """
        if any(child.type in INTERPOLATION_NODE_TYPES for child in node.children):
            return False
        if self._is_module_path(node):
            return True
        text = self._parsed.text_of(node)
        parts = split_string(text)
        if parts is None:
            logger.debug(f"Skipping unrecognized string literal (text={text!r})")
            return True
        masked = self._table.mint_string_tag(text, parts.wrap)
        self.edits.append(TextEdit(node.start_byte, node.end_byte, masked))
        self.strings_masked += 1
        return True

    def _visit_comment(self, node: Any) -> None:
        """Replace a comment's content with a tag, keeping its delimiters.

        Args:
            node: Comment node.
        """
        text = self._parsed.text_of(node)
        if node.start_byte == 0 and text.startswith("#!"):
            return
        parts = split_comment(text)
        if parts is None:
            logger.debug(f"Skipping unrecognized comment (text={text!r})")
            return
        tag = self._table.mint_comment_tag(parts.content)
        self.edits.append(TextEdit(node.start_byte, node.end_byte, parts.wrap(tag)))
        self.comments_masked += 1

    def _is_external_member(self, node: Any) -> bool:
        """Check whether a node is a member accessed on an imported name.

        Args:
            node: Identifier-class node.

        Returns:
            True when the node is the property of ``external.<node>``.
        """
        if self._member_fields is None:
            return False
        member_type, object_field, property_field = self._member_fields
        parent = node.parent
        if parent is None or parent.type != member_type:
            return False
        if parent.child_by_field_name(property_field) != node:
            return False
        root = parent.child_by_field_name(object_field)
        while root is not None and root.type == member_type:
            root = root.child_by_field_name(object_field)
        if root is None or root.type != "identifier":
            return False
        return self._parsed.text_of(root) in self._external_symbols

    def _is_foreign_keyword(self, node: Any) -> bool:
        """Check whether a node names a keyword argument of a non-local callee.

        Args:
            node: Identifier-class node.

        Returns:
            True when the keyword belongs to a call of an unmapped function.
        """
        parent = node.parent
        if parent is None or parent.type != KEYWORD_ARGUMENT_TYPE:
            return False
        if parent.child_by_field_name("name") != node:
            return False
        call = parent.parent.parent if parent.parent is not None else None
        if call is None or call.type != "call":
            return False
        callee = _callee_name(self._parsed, call.child_by_field_name("function"))
        return callee is None or self._table.lookup(callee) is None

    def _is_module_path(self, node: Any) -> bool:
        """Check whether a string is the module path of an import or loader call.

        Args:
            node: String literal node.

        Returns:
            True when rewriting the string would break module resolution.
        """
        parent = node.parent
        if parent is None:
            return False
        if parent.type == IMPORT_REQUIRE_TYPE:
            return True
        if parent.type in IMPORT_STATEMENT_TYPES:
            return parent.child_by_field_name("source") == node
        if parent.type not in ("arguments", "argument_list") or parent.parent is None:
            return False
        call = parent.parent
        if call.type not in ("call", "call_expression"):
            return False
        if not parent.named_children or parent.named_children[0] != node:
            return False
        callee = _callee_name(self._parsed, call.child_by_field_name("function"))
        return callee in MODULE_LOADER_CALLS


def _callee_name(parsed: ParsedSource, function: Any) -> str | None:
    """Resolve the trailing name of a call's function expression.

    Args:
        parsed: Parsed source.
        function: Function node of a call.

    Returns:
        Simple callee name when resolvable.
    """
    if function is None:
        return None
    if function.type == "import":
        return "import"
    if function.type == "identifier":
        return parsed.text_of(function)
    for field_name in ("attribute", "property"):
        member = function.child_by_field_name(field_name)
        if member is not None:
            return parsed.text_of(member)
    return None


def _coerce_options(options: OptionsInput) -> SanitizeOptions:
    if options is None:
        return SanitizeOptions()
    if isinstance(options, SanitizeOptions):
        return options
    return SanitizeOptions.from_mapping(options)


class CodeSanitizer:
    """Mask defined names, literals and comments of one source at a time.

    The syntax provider is reused across calls; every call builds its own
    mapping table, so no mapping state carries over between calls.
    """

    def __init__(
        self,
        provider: SyntaxProvider | None = None,
        default_options: SanitizeOptions | None = None,
    ) -> None:
        """Initialize sanitizer.

        Args:
            provider: Syntax provider; a new one is created when omitted.
            default_options: Options used when a call passes none.
        """
        self._provider = provider or SyntaxProvider()
        self._default_options = default_options or SanitizeOptions()

    @property
    def provider(self) -> SyntaxProvider:
        return self._provider

    def sanitize_unit(
        self, unit: SourceUnit, options: OptionsInput = None
    ) -> SanitizeResult:
        """Sanitize a source unit."""
        return self.sanitize(unit.text, unit.language_id, options)

    def sanitize(
        self, code: str, language_id: str, options: OptionsInput = None
    ) -> SanitizeResult:
        """Sanitize one source text.

        Parser, grammar and query failures fail open: the input comes back
        unchanged with an empty mapping.

        Args:
            code: Source text.
            language_id: Editor language id.
            options: Sanitize options or their wire-format mapping.

        Returns:
            Sanitized text, mapping and counters.
        """
        resolved = self._default_options if options is None else _coerce_options(options)
        try:
            parsed = self._provider.parse(code, language_id)
            reserved = build_reserved_set(parsed.query_key, resolved)
            index = collect_definitions(
                provider=self._provider,
                parsed=parsed,
                options=resolved,
                reserved=reserved,
            )
        except (UnsupportedLanguageError, ParserInitError, QueryConstructionError) as exc:
            logger.warning(
                f"Sanitize skipped, returning input unchanged "
                f"(language_id={language_id} error={exc})"
            )
            return SanitizeResult(
                sanitized=code,
                mapping={},
                language_id=language_id,
                skipped_reason=str(exc),
            )

        if parsed.root_node.has_error:
            logger.debug(f"Source has syntax errors (language_id={language_id})")

        table = MappingTable(taken_names=index.source_identifiers, source_text=code)
        for definition in index.definitions:
            table.get_or_create(definition.text, definition.category)

        walker = _SanitizingWalker(
            parsed=parsed, table=table, index=index, options=resolved
        )
        walker.walk()
        sanitized = apply_edits(parsed.source, walker.edits).decode("utf-8")

        logger.info(
            f"Sanitize completed (language_id={language_id} "
            f"definitions={len(index.definitions)} "
            f"identifiers_renamed={walker.identifiers_renamed} "
            f"strings_masked={walker.strings_masked} "
            f"comments_masked={walker.comments_masked})"
        )
        return SanitizeResult(
            sanitized=sanitized,
            mapping=table.as_mapping(),
            language_id=language_id,
            identifiers_renamed=walker.identifiers_renamed,
            strings_masked=walker.strings_masked,
            comments_masked=walker.comments_masked,
        )


def sanitize(
    code: str,
    language_id: str,
    options: OptionsInput = None,
    provider: SyntaxProvider | None = None,
) -> SanitizeResult:
    """Sanitize one source text with a fresh mapping table.

    Args:
        code: Source text.
        language_id: Editor language id.
        options: Sanitize options or their wire-format mapping.
        provider: Optional syntax provider to reuse loaded grammars.

    Returns:
        Sanitized text, mapping and counters.
    """
    return CodeSanitizer(provider=provider).sanitize(code, language_id, options)
