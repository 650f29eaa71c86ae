# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the bidirectional mapping table."""

from sanitizer.mapping import MappingTable
from sanitizer.model import Category


def _quote(tag: str) -> str:
    return f'"{tag}"'


def test_map_001_same_original_always_gets_same_masked_name() -> None:
    table = MappingTable()

    first = table.get_or_create("counter", Category.VARIABLE)
    second = table.get_or_create("counter", Category.VARIABLE)

    assert first == "VAR_1"
    assert second == "VAR_1"
    assert len(table) == 1
    assert "counter" in table


def test_map_002_counters_are_kept_per_prefix() -> None:
    table = MappingTable()

    assert table.get_or_create("counter", Category.VARIABLE) == "VAR_1"
    assert table.get_or_create("userName", Category.VARIABLE) == "STR_1"
    assert table.get_or_create("offset", Category.VARIABLE) == "VAR_2"
    assert table.get_or_create("render_page", Category.FUNCTION) == "ACTION_1"
    assert table.as_mapping() == {
        "VAR_1": "counter",
        "STR_1": "userName",
        "VAR_2": "offset",
        "ACTION_1": "render_page",
    }


def test_map_003_string_tags_reuse_exact_literal_text() -> None:
    table = MappingTable()

    first = table.mint_string_tag('"secret"', _quote)
    again = table.mint_string_tag('"secret"', _quote)
    other = table.mint_string_tag("'secret'", _quote)

    assert first == '"[[STR_1]]"'
    assert again == first
    assert other == '"[[STR_2]]"'
    assert table.original_for("[[STR_1]]") == '"secret"'
    assert table.original_for("[[STR_2]]") == "'secret'"


def test_map_004_string_tags_do_not_consume_str_name_counter() -> None:
    table = MappingTable()

    table.mint_string_tag('"secret"', _quote)
    masked = table.get_or_create("title", Category.VARIABLE)

    assert masked == "STR_1"
    assert table.as_mapping() == {"[[STR_1]]": '"secret"', "STR_1": "title"}


def test_map_005_comment_tags_are_minted_per_comment() -> None:
    table = MappingTable()

    first = table.mint_comment_tag(" note")
    second = table.mint_comment_tag(" note")

    assert first == "[[CMT_1]]"
    assert second == "[[CMT_2]]"
    assert table.original_for("[[CMT_2]]") == " note"


def test_map_006_entries_carry_categories_in_insertion_order() -> None:
    table = MappingTable()
    table.get_or_create("Widget", Category.CLASS)
    table.mint_comment_tag(" todo")

    entries = table.entries()

    assert [(entry.original, entry.masked) for entry in entries] == [
        ("Widget", "ENTITY_1"),
        (" todo", "[[CMT_1]]"),
    ]
    assert entries[0].category is Category.CLASS
    assert entries[1].category is None


def test_map_007_lookup_of_unknown_names_returns_none() -> None:
    table = MappingTable()

    assert table.lookup("missing") is None
    assert table.original_for("VAR_9") is None


def test_map_008_taken_names_and_source_tags_are_never_minted() -> None:
    table = MappingTable(
        taken_names={"VAR_1", "counter"},
        source_text='note = "[[STR_1]]"  # [[CMT_1]]\n',
    )

    assert table.get_or_create("counter", Category.VARIABLE) == "VAR_2"
    assert table.mint_string_tag('"secret"', _quote) == '"[[STR_2]]"'
    assert table.mint_comment_tag(" note") == "[[CMT_2]]"
    assert table.original_for("VAR_1") is None
