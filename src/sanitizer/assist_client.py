# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assistant client abstractions."""

import logging
from typing import Protocol

from sanitizer.syntax import SanitizerError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: str = (
    "You receive source code whose identifiers, strings and comments were "
    "replaced by placeholders. Keep every placeholder exactly as written and "
    "reply with the full updated code in a single fenced code block."
)


class AssistError(SanitizerError):
    """Represent an assistant request failure."""


class AssistClient(Protocol):
    """Define completion behavior for an assistant provider."""

    def complete(self, prompt: str) -> str:
        """Complete a sanitized prompt.

        Args:
            prompt: Prompt containing only sanitized code.

        Returns:
            Assistant response text.

        Raises:
            AssistError: If the request fails or the response is empty.
        """
