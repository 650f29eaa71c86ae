# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Tree-sitter syntax provider for supported editor languages."""

import importlib
import logging
from dataclasses import dataclass
from typing import Any

import tree_sitter
from tree_sitter import Query, QueryCursor, QueryError

logger = logging.getLogger(__name__)


class SanitizerError(RuntimeError):
    """Represent a sanitizer library failure."""


class UnsupportedLanguageError(SanitizerError):
    """Represent a language id with no registered grammar."""


class ParserInitError(SanitizerError):
    """Represent a grammar or parser that could not be loaded."""


class QueryConstructionError(SanitizerError):
    """Represent a query that does not compile for a grammar."""


@dataclass(frozen=True)
class LanguageSpec:
    """Describe how to load the grammar for one editor language id.

    Args:
        language_id: Editor language id, e.g. ``typescriptreact``.
        grammar_module: Importable grammar wheel module.
        language_func: Function in the module returning the language pointer.
        query_key: Key of the query set shared by the language family.
    """

    language_id: str
    grammar_module: str
    language_func: str
    query_key: str


LANGUAGES: dict[str, LanguageSpec] = {
    "python": LanguageSpec("python", "tree_sitter_python", "language", "python"),
    "typescript": LanguageSpec(
        "typescript", "tree_sitter_typescript", "language_typescript", "typescript"
    ),
    "javascript": LanguageSpec(
        "javascript", "tree_sitter_typescript", "language_typescript", "typescript"
    ),
    "typescriptreact": LanguageSpec(
        "typescriptreact", "tree_sitter_typescript", "language_tsx", "typescript"
    ),
    "javascriptreact": LanguageSpec(
        "javascriptreact", "tree_sitter_typescript", "language_tsx", "typescript"
    ),
}

SUFFIX_LANGUAGES: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".tsx": "typescriptreact",
    ".jsx": "javascriptreact",
}


@dataclass(frozen=True)
class ParsedSource:
    """Hold one parsed source buffer.

    Args:
        language_id: Editor language id used for parsing.
        query_key: Query family of the language.
        source: UTF-8 encoded source; node offsets index into it.
        tree: Tree-sitter tree.
        language: Tree-sitter language the tree was parsed with.
    """

    language_id: str
    query_key: str
    source: bytes
    tree: Any
    language: Any

    @property
    def root_node(self) -> Any:
        return self.tree.root_node

    def text_of(self, node: Any) -> str:
        """Decode the source text spanned by a node."""
        return self.source[node.start_byte : node.end_byte].decode("utf-8")


def language_for_suffix(suffix: str) -> str | None:
    """Resolve an editor language id from a file suffix."""
    return SUFFIX_LANGUAGES.get(suffix.lower())


def resolve_language(language_id: str) -> LanguageSpec:
    """Resolve the registry entry for a language id.

    Raises:
        UnsupportedLanguageError: If no grammar is registered for the id.
    """
    spec = LANGUAGES.get(language_id)
    if spec is None:
        raise UnsupportedLanguageError(f"Unsupported language: {language_id}")
    return spec


class SyntaxProvider:
    """Parse sources and run structural queries with tree-sitter.

    Grammars are imported on first use and cached, so switching languages
    only pays the load cost once per grammar.
    """

    def __init__(self) -> None:
        self._parser: tree_sitter.Parser | None = None
        self._languages: dict[tuple[str, str], tree_sitter.Language] = {}
        self._queries: dict[tuple[int, str], Query] = {}

    def parse(self, code: str, language_id: str) -> ParsedSource:
        """Parse code with the grammar registered for a language id.

        Args:
            code: Source text.
            language_id: Editor language id.

        Returns:
            Parsed source.

        Raises:
            UnsupportedLanguageError: If the language id is not registered.
            ParserInitError: If the grammar or parser cannot be loaded.
        """
        spec = resolve_language(language_id)
        language = self._load_language(spec)
        parser = self._get_parser()
        source = code.encode("utf-8")
        try:
            parser.language = language
            tree = parser.parse(source)
        except (ValueError, TypeError) as exc:
            logger.warning(
                f"Parser setup failed (language_id={language_id} error={exc})"
            )
            raise ParserInitError(str(exc)) from exc
        return ParsedSource(
            language_id=language_id,
            query_key=spec.query_key,
            source=source,
            tree=tree,
            language=language,
        )

    def captures(self, parsed: ParsedSource, query_text: str) -> dict[str, list[Any]]:
        """Run a query over a parsed source and group nodes by capture name.

        Args:
            parsed: Parsed source.
            query_text: Tree-sitter query source.

        Returns:
            Captured nodes keyed by capture name.

        Raises:
            QueryConstructionError: If the query does not compile.
        """
        query = self._compile(parsed.language, query_text)
        cursor = QueryCursor(query)
        captured: dict[str, list[Any]] = cursor.captures(parsed.root_node)
        return captured

    def _compile(self, language: tree_sitter.Language, query_text: str) -> Query:
        key = (id(language), query_text)
        cached = self._queries.get(key)
        if cached is not None:
            return cached
        try:
            query = Query(language, query_text)
        except (QueryError, NameError, SyntaxError, ValueError) as exc:
            logger.warning(f"Query construction failed (error={exc})")
            raise QueryConstructionError(str(exc)) from exc
        self._queries[key] = query
        return query

    def _get_parser(self) -> tree_sitter.Parser:
        if self._parser is None:
            try:
                self._parser = tree_sitter.Parser()
            except (OSError, RuntimeError, ValueError) as exc:
                logger.warning(f"Parser initialization failed (error={exc})")
                raise ParserInitError(str(exc)) from exc
        return self._parser

    def _load_language(self, spec: LanguageSpec) -> tree_sitter.Language:
        key = (spec.grammar_module, spec.language_func)
        cached = self._languages.get(key)
        if cached is not None:
            return cached
        try:
            module = importlib.import_module(spec.grammar_module)
            language_fn = getattr(module, spec.language_func)
            language = tree_sitter.Language(language_fn())
        except (ImportError, AttributeError, OSError, ValueError, TypeError) as exc:
            logger.warning(
                f"Grammar load failed (language_id={spec.language_id} "
                f"module={spec.grammar_module} error={exc})"
            )
            raise ParserInitError(
                f"Language not available: {spec.language_id}"
            ) from exc
        self._languages[key] = language
        return language
