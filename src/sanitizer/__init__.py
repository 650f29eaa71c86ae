# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for sanitizer components."""

from sanitizer.engine import CodeSanitizer, sanitize
from sanitizer.mapping import MappingTable
from sanitizer.model import (
    Category,
    DefinitionOccurrence,
    MappingEntry,
    SanitizeOptions,
    SanitizeResult,
    SourceUnit,
)
from sanitizer.prompt import extract_response, render_prompt, restore_from_response
from sanitizer.restorer import (
    InvalidMappingFormatError,
    RestoreMode,
    parse_mapping,
    restore_with_map,
)
from sanitizer.syntax import (
    ParserInitError,
    QueryConstructionError,
    SanitizerError,
    SyntaxProvider,
    UnsupportedLanguageError,
)

__all__ = [
    "Category",
    "CodeSanitizer",
    "DefinitionOccurrence",
    "InvalidMappingFormatError",
    "MappingEntry",
    "MappingTable",
    "ParserInitError",
    "QueryConstructionError",
    "RestoreMode",
    "SanitizeOptions",
    "SanitizeResult",
    "SanitizerError",
    "SourceUnit",
    "SyntaxProvider",
    "UnsupportedLanguageError",
    "extract_response",
    "parse_mapping",
    "render_prompt",
    "restore_from_response",
    "restore_with_map",
    "sanitize",
]
