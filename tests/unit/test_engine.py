# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the sanitization pass."""

import pytest

from sanitizer import (
    CodeSanitizer,
    ParserInitError,
    SanitizeOptions,
    SourceUnit,
    SyntaxProvider,
    queries,
    restore_with_map,
    sanitize,
)

PY_TOTAL = (
    "def calculate_total(items_list, tax_rate):\n"
    "    subtotal = sum(items_list)\n"
    "    return subtotal * tax_rate\n"
)


def test_eng_001_python_definitions_are_masked_with_semantic_prefixes() -> None:
    result = sanitize(PY_TOTAL, "python")

    assert result.sanitized == (
        "def NUM_1(LIST_1, VAR_1):\n"
        "    VAR_2 = sum(LIST_1)\n"
        "    return VAR_2 * VAR_1\n"
    )
    assert result.mapping == {
        "NUM_1": "calculate_total",
        "LIST_1": "items_list",
        "VAR_1": "tax_rate",
        "VAR_2": "subtotal",
    }
    assert result.identifiers_renamed == 7
    assert result.skipped_reason is None


def test_eng_002_restore_reproduces_original_source() -> None:
    result = sanitize(PY_TOTAL, "python")

    assert restore_with_map(result.sanitized, result.mapping) == PY_TOTAL


def test_eng_003_typescript_function_round_trips() -> None:
    code = "function combine(left, right) { return left + right; }"

    result = sanitize(code, "typescript")

    assert result.sanitized == "function ACTION_1(VAR_1, VAR_2) { return VAR_1 + VAR_2; }"
    assert result.mapping == {"ACTION_1": "combine", "VAR_1": "left", "VAR_2": "right"}
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_004_mapping_is_a_bijection() -> None:
    result = sanitize(PY_TOTAL, "python")

    assert len(set(result.mapping.values())) == len(result.mapping)
    assert len(set(result.mapping.keys())) == len(result.mapping)


def test_eng_005_imported_names_and_their_members_are_preserved() -> None:
    code = (
        "import os\n"
        "from pathlib import Path\n"
        "\n"
        "def load_config(config_path):\n"
        "    base_dir = os.getcwd()\n"
        "    return Path(base_dir) / config_path\n"
    )

    result = sanitize(code, "python")

    assert "import os\n" in result.sanitized
    assert "from pathlib import Path\n" in result.sanitized
    assert "os.getcwd()" in result.sanitized
    assert "load_config" not in result.sanitized
    assert "def ACTION_1(VAR_1):" in result.sanitized
    assert "return Path(VAR_2) / VAR_1" in result.sanitized


def test_eng_006_reserved_names_and_private_names_are_not_masked() -> None:
    code = (
        "class Account:\n"
        "    def __init__(self, owner_name):\n"
        "        self.owner_name = owner_name\n"
    )

    result = sanitize(code, "python")

    assert result.sanitized == (
        "class ENTITY_1:\n"
        "    def __init__(self, STR_1):\n"
        "        self.STR_1 = STR_1\n"
    )
    assert "self" not in result.mapping.values()
    assert "__init__" not in result.mapping.values()


def test_eng_007_keyword_arguments_of_external_calls_are_kept() -> None:
    code = (
        "import requests\n"
        "\n"
        "def fetch_page(page_url, timeout):\n"
        "    return requests.get(page_url, timeout=timeout)\n"
    )

    result = sanitize(code, "python")

    assert "return requests.get(VAR_1, timeout=VAR_2)" in result.sanitized
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_008_string_literals_are_masked_when_enabled() -> None:
    code = "greeting = 'hello'\nfarewell = 'hello'\n"

    result = sanitize(code, "python", SanitizeOptions(mask_strings=True))

    assert result.sanitized == 'VAR_1 = "[[STR_1]]"\nVAR_2 = "[[STR_1]]"\n'
    assert result.mapping["[[STR_1]]"] == "'hello'"
    assert result.strings_masked == 2
    assert restore_with_map(result.sanitized, result.mapping) == (
        'greeting = "hello"\nfarewell = "hello"\n'
    )


def test_eng_009_module_paths_are_never_masked() -> None:
    code = (
        'import { helper } from "./helpers";\n'
        'const secretValue = "token";\n'
    )

    result = sanitize(code, "typescript", {"maskStrings": True})

    assert 'from "./helpers"' in result.sanitized
    assert "import { helper }" in result.sanitized
    assert 'const VAR_1 = "[[STR_1]]";' in result.sanitized


def test_eng_010_comments_are_masked_and_restored_with_delimiters() -> None:
    code = "// secret note\nconst answer = 42;\n"

    result = sanitize(code, "typescript", SanitizeOptions(remove_comments=True))

    assert result.sanitized == "//[[CMT_1]]\nconst VAR_1 = 42;\n"
    assert result.mapping["[[CMT_1]]"] == " secret note"
    assert result.comments_masked == 1
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_011_comments_are_kept_when_masking_is_disabled() -> None:
    code = "# keep me\ncounter = 1\n"

    result = sanitize(code, "python")

    assert result.sanitized == "# keep me\nVAR_1 = 1\n"


def test_eng_012_unsupported_language_fails_open() -> None:
    code = "MOVE 1 TO COUNTER."

    result = sanitize(code, "cobol")

    assert result.sanitized == code
    assert result.mapping == {}
    assert result.skipped_reason is not None


def test_eng_013_non_ascii_text_keeps_correct_offsets() -> None:
    code = 'greeting_text = "héllo wörld"\nfarewell_text = greeting_text\n'

    result = sanitize(code, "python")

    assert result.sanitized == 'STR_1 = "héllo wörld"\nSTR_2 = STR_1\n'
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_014_already_masked_names_are_not_masked_again() -> None:
    first = sanitize(PY_TOTAL, "python")

    second = sanitize(first.sanitized, "python")

    assert second.sanitized == first.sanitized
    assert second.mapping == {}


def test_eng_015_category_toggles_and_whitelist_are_honored() -> None:
    no_funcs = sanitize(PY_TOTAL, "python", SanitizeOptions(mask_funcs=False))
    whitelisted = sanitize(
        PY_TOTAL, "python", SanitizeOptions(whitelist=("tax_rate",))
    )

    assert no_funcs.sanitized.startswith("def calculate_total(LIST_1, VAR_1):")
    assert "tax_rate" not in whitelisted.mapping.values()
    assert "tax_rate" in whitelisted.sanitized


def test_eng_016_min_name_length_filters_short_names() -> None:
    code = "def combine(a, b):\n    return a + b\n"

    default = sanitize(code, "python")
    single = sanitize(code, "python", SanitizeOptions(min_name_length=1))

    assert default.sanitized == "def ACTION_1(a, b):\n    return a + b\n"
    assert single.sanitized == "def ACTION_1(VAR_1, VAR_2):\n    return VAR_1 + VAR_2\n"


def test_eng_017_calls_are_deterministic_and_independent() -> None:
    sanitizer = CodeSanitizer(provider=SyntaxProvider())
    other = "function render_widget(widget) { return widget; }"

    first = sanitizer.sanitize(PY_TOTAL, "python")
    sanitizer.sanitize(other, "typescript")
    second = sanitizer.sanitize_unit(SourceUnit(text=PY_TOTAL, language_id="python"))

    assert first == second


def test_eng_018_tsx_hooks_and_props_get_dedicated_prefixes() -> None:
    code = (
        "interface ButtonProps { label: string; }\n"
        "function useToggle(initial: boolean) { return initial; }\n"
    )

    result = sanitize(code, "typescriptreact")

    assert result.sanitized == (
        "interface PROPS_DEF_1 { label: string; }\n"
        "function HOOK_1(VAR_1: boolean) { return VAR_1; }\n"
    )


def test_eng_019_minted_names_skip_spellings_already_in_the_source() -> None:
    code = "VAR_1 = 5\ncounter = VAR_1 + 1\n"

    result = sanitize(code, "python")

    assert result.sanitized == "VAR_1 = 5\nVAR_2 = VAR_1 + 1\n"
    assert result.mapping == {"VAR_2": "counter"}
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_020_import_require_keeps_its_module_path_and_binding() -> None:
    code = 'import fs = require("fs");\nconst filePath = "data";\n'

    result = sanitize(code, "typescript", {"maskStrings": True})

    assert result.sanitized.startswith('import fs = require("fs");\n')
    assert 'const VAR_1 = "[[STR_1]]";' in result.sanitized
    assert "fs" not in result.mapping.values()
    assert restore_with_map(result.sanitized, result.mapping) == code


def test_eng_021_grammar_load_failure_fails_open(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_load(self: SyntaxProvider, spec: object) -> object:
        raise ParserInitError("Language not available: python")

    monkeypatch.setattr(SyntaxProvider, "_load_language", fail_load)

    result = sanitize(PY_TOTAL, "python")

    assert result.sanitized == PY_TOTAL
    assert result.mapping == {}
    assert result.skipped_reason == "Language not available: python"


def test_eng_022_broken_definition_query_fails_open(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setitem(queries.DEFINITION_QUERIES, "python", "(function_definition")

    result = CodeSanitizer(provider=SyntaxProvider()).sanitize(PY_TOTAL, "python")

    assert result.sanitized == PY_TOTAL
    assert result.mapping == {}
    assert result.identifiers_renamed == 0
    assert result.skipped_reason is not None
