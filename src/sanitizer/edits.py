# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Apply non-overlapping span replacements to a source buffer."""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEdit:
    """Replace the byte span ``[start, end)`` with ``replacement``."""

    start: int
    end: int
    replacement: str


def apply_edits(source: bytes, edits: list[TextEdit]) -> bytes:
    """Apply edits by copying untouched gaps into a fresh buffer.

    Offsets always refer to the original buffer, so no edit shifts another.

    Args:
        source: Original UTF-8 buffer.
        edits: Edits in any order.

    Returns:
        Rewritten buffer.

    Raises:
        ValueError: If an edit is out of range or two edits overlap.
    """
    ordered = sorted(edits, key=lambda edit: (edit.start, edit.end))
    output = bytearray()
    cursor = 0
    for edit in ordered:
        if edit.start < cursor or edit.end < edit.start or edit.end > len(source):
            raise ValueError(
                f"Invalid or overlapping edit span: ({edit.start}, {edit.end})"
            )
        output.extend(source[cursor : edit.start])
        output.extend(edit.replacement.encode("utf-8"))
        cursor = edit.end
    output.extend(source[cursor:])
    return bytes(output)
