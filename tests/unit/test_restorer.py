# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for restoration from sanitized text."""

import json

import pytest

from sanitizer.restorer import (
    InvalidMappingFormatError,
    RestoreMode,
    parse_mapping,
    restore_with_map,
)


def test_res_001_string_tags_restore_content_inside_current_quotes() -> None:
    mapping = {"[[STR_1]]": '"hello"'}

    double = restore_with_map('const msg = "[[STR_1]]";', mapping)
    single = restore_with_map("const msg = '[[STR_1]]';", mapping)

    assert double == 'const msg = "hello";'
    assert single == "const msg = 'hello';"


def test_res_002_comment_tags_restore_inner_content() -> None:
    restored = restore_with_map("//[[CMT_1]]\nx", {"[[CMT_1]]": " secret note"})

    assert restored == "// secret note\nx"


def test_res_003_unknown_tokens_are_left_unchanged() -> None:
    restored = restore_with_map(
        "VAR_99 + VAR_1 + [[STR_7]]", {"VAR_1": "total"}
    )

    assert restored == "VAR_99 + total + [[STR_7]]"


def test_res_004_names_are_replaced_on_whole_word_boundaries() -> None:
    mapping = {"VAR_1": "alpha", "VAR_10": "beta"}

    restored = restore_with_map("VAR_1 + VAR_10 + MY_VAR_1 + $VAR_1", mapping)

    assert restored == "alpha + beta + MY_VAR_1 + $VAR_1"


def test_res_005_reformatted_text_is_still_restored() -> None:
    mapping = {"ACTION_1": "combine", "VAR_1": "left", "VAR_2": "right"}
    reformatted = "function ACTION_1(\n    VAR_1,\n    VAR_2,\n) {\n  return VAR_1 + VAR_2;\n}\n"

    restored = restore_with_map(reformatted, mapping)

    assert restored == (
        "function combine(\n    left,\n    right,\n) {\n  return left + right;\n}\n"
    )


def test_res_006_restored_text_is_not_rescanned() -> None:
    mapping = {"VAR_1": "VAR_2", "VAR_2": "other"}

    assert restore_with_map("VAR_1 VAR_2", mapping) == "VAR_2 other"


def test_res_007_mapping_accepts_json_text_and_pairs() -> None:
    as_json = json.dumps({"VAR_1": "total"})

    assert restore_with_map("VAR_1", as_json) == "total"
    assert restore_with_map("VAR_1", [("VAR_1", "total")]) == "total"


@pytest.mark.parametrize(
    "mapping",
    ["{not json", "[1, 2]", '{"VAR_1": 3}', 42],
)
def test_res_008_invalid_mappings_raise_format_error(mapping: object) -> None:
    with pytest.raises(InvalidMappingFormatError):
        parse_mapping(mapping)  # type: ignore[arg-type]


def test_res_009_structural_mode_only_touches_code_nodes() -> None:
    code = 'const VAR_1 = "[[STR_1]]"; // keep VAR_1 here\n'
    mapping = {"VAR_1": "total", "[[STR_1]]": "'hello'"}

    restored = restore_with_map(
        code, mapping, language_id="typescript", mode=RestoreMode.STRUCTURAL
    )

    assert restored == 'const total = "hello"; // keep VAR_1 here\n'


def test_res_010_structural_mode_restores_comment_tags() -> None:
    code = "#[[CMT_1]]\nVAR_1 = 1\n"
    mapping = {"[[CMT_1]]": " counter", "VAR_1": "counter"}

    restored = restore_with_map(code, mapping, language_id="python", mode="structural")

    assert restored == "# counter\ncounter = 1\n"


def test_res_011_structural_mode_requires_language() -> None:
    with pytest.raises(ValueError):
        restore_with_map("VAR_1", {"VAR_1": "x"}, mode=RestoreMode.STRUCTURAL)
