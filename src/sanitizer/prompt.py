# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Render assistant prompts and extract code from assistant responses."""

import json
import logging
import re
from dataclasses import dataclass

from sanitizer.model import SanitizeResult
from sanitizer.restorer import (
    InvalidMappingFormatError,
    MappingInput,
    RestoreMode,
    parse_mapping,
    restore_with_map,
)
from sanitizer.syntax import SyntaxProvider

logger = logging.getLogger(__name__)

FENCE = "```"

PROMPT_INSTRUCTIONS = (
    "You are an expert developer. Refactor or fix the code below.\n"
    "IMPORTANT: The code is sanitized for security (e.g., VAR_1, ACTION_1, "
    "[[STR_1]], [[CMT_1]]).\n"
    "1. Analyze the logic flow despite the obfuscated names.\n"
    "2. Do NOT change the masked names or tags (keep VAR_1 as VAR_1).\n"
    "3. If you create NEW variables, use meaningful names.\n"
    "4. Return the result in the same format: the code block first"
)

_MAP_BLOCK_RE = re.compile(r"map table\s*```json\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"\bcode\s*```[\w+-]*[ \t]*\n(.*?)\n?```", re.IGNORECASE | re.DOTALL)
_ANY_BLOCK_RE = re.compile(r"```([\w+-]*)[ \t]*\n(.*?)\n?```", re.DOTALL)


@dataclass(frozen=True)
class AssistantResponse:
    """Represent code and optional mapping found in an assistant response."""

    code: str
    mapping: dict[str, str] | None


def render_prompt(
    result: SanitizeResult, language_id: str, include_mapping: bool = True
) -> str:
    """Render the assistant prompt for a sanitized source.

    Args:
        result: Sanitize result.
        language_id: Language id used to label the code block.
        include_mapping: Append the map table block.

    Returns:
        Prompt text with instructions, code block and optional map table.
    """
    instructions = PROMPT_INSTRUCTIONS
    instructions += ", then the map table block." if include_mapping else "."
    sections = [
        f"prompt:\n{FENCE}txt\n{instructions}\n{FENCE}",
        f"code\n{FENCE}{language_id}\n{result.sanitized}\n{FENCE}",
    ]
    if include_mapping:
        mapping_json = json.dumps(result.mapping, indent=2, ensure_ascii=False)
        sections.append(f"map table\n{FENCE}json\n{mapping_json}\n{FENCE}")
    return "\n\n".join(sections)


def extract_response(text: str) -> AssistantResponse:
    """Extract the code block and map table from an assistant response.

    Args:
        text: Full response text.

    Returns:
        Extracted code and mapping. Without a code block the whole text is
        treated as code; without a map table the mapping is None.

    Raises:
        InvalidMappingFormatError: If the map table block is not valid JSON.
    """
    mapping: dict[str, str] | None = None
    map_match = _MAP_BLOCK_RE.search(text)
    if map_match:
        mapping = parse_mapping(map_match.group(1))

    code_match = _CODE_BLOCK_RE.search(text)
    if code_match:
        return AssistantResponse(code=code_match.group(1), mapping=mapping)
    for block in _ANY_BLOCK_RE.finditer(text):
        if block.group(1).lower() in ("json", "txt"):
            continue
        return AssistantResponse(code=block.group(2), mapping=mapping)
    logger.debug("No code block found in response, using full text")
    return AssistantResponse(code=text, mapping=mapping)


def restore_from_response(
    text: str,
    fallback_mapping: MappingInput | None = None,
    language_id: str | None = None,
    mode: RestoreMode | str = RestoreMode.TAGS,
    provider: SyntaxProvider | None = None,
) -> str:
    """Restore the code of an assistant response.

    The response's own map table wins over the fallback mapping.

    Args:
        text: Full response text.
        fallback_mapping: Mapping used when the response carries none.
        language_id: Editor language id; required for structural mode.
        mode: Restoration strategy.
        provider: Optional syntax provider for structural mode.

    Returns:
        Restored code.

    Raises:
        InvalidMappingFormatError: If no usable mapping is available.
    """
    response = extract_response(text)
    mapping: MappingInput | None = response.mapping or fallback_mapping
    if mapping is None:
        logger.warning("No mapping available to restore the response")
        raise InvalidMappingFormatError("No mapping table found in the response.")
    return restore_with_map(
        response.code,
        mapping,
        language_id=language_id,
        mode=mode,
        provider=provider,
    )
