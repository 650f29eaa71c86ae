# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assistant client implementations for the code sanitizer."""

from sanitizer.llm.ollama import OllamaClient
from sanitizer.llm.openai_client import OPENAI_DEFAULT_MODEL, OpenAIClient

__all__ = ["OllamaClient", "OpenAIClient", "OPENAI_DEFAULT_MODEL"]
