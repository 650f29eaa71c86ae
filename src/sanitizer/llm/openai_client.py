# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assistant client OpenAI implementation."""

import logging
from typing import Any
from urllib.parse import urlparse

from openai import OpenAI, OpenAIError

from sanitizer.assist_client import SYSTEM_PROMPT, AssistError

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_MODEL: str = "gpt-5.2-codex"
OPENAI_DEFAULT_BASE_URL: str = "https://api.openai.com/v1"
_OPENAI_HOSTS: frozenset[str] = frozenset(
    {"openai", "openai.com", "www.openai.com", "api.openai.com"}
)


class OpenAIClient:
    """Complete sanitized prompts using OpenAI's Responses API.

    The reply is read from ``output_text`` when the SDK provides it, otherwise
    from the message items of ``output``. A refusal is reported as an error so
    the caller never restores a refusal message as if it were code.
    """

    def __init__(
        self,
        provider_url: str,
        model: str = OPENAI_DEFAULT_MODEL,
        max_output_tokens: int | None = None,
    ) -> None:
        """Initialize client configuration.

        Args:
            provider_url: OpenAI-compatible endpoint base URL or alias.
            model: Model identifier used for completion.
            max_output_tokens: Optional cap on reply length.
        """
        self._provider_url = provider_url
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._client: OpenAI | None = None

    def complete(self, prompt: str) -> str:
        """Complete a sanitized prompt.

        Args:
            prompt: Sanitized prompt text.

        Returns:
            Reply text.

        Raises:
            AssistError: If the request fails, is refused, or has no content.
        """
        client = self._get_client()
        request: dict[str, Any] = {
            "model": self._model,
            "instructions": SYSTEM_PROMPT,
            "input": prompt,
        }
        if self._max_output_tokens is not None:
            request["max_output_tokens"] = self._max_output_tokens
        try:
            response = client.responses.create(**request)
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI request failed (provider_url={self._provider_url} "
                f"model={self._model} error={exc})"
            )
            raise AssistError(str(exc)) from exc

        content, refusal = _read_reply(response)
        if refusal:
            logger.warning(
                f"OpenAI refused the prompt (model={self._model} refusal={refusal})"
            )
            raise AssistError(f"OpenAI refused the prompt: {refusal}")
        if not content:
            logger.warning(
                f"OpenAI response did not contain content "
                f"(provider_url={self._provider_url} model={self._model})"
            )
            raise AssistError("OpenAI response does not contain generation content.")
        logger.debug(f"OpenAI reply received (model={self._model} chars={len(content)})")
        return content

    def _get_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        try:
            self._client = OpenAI(base_url=normalize_provider_url(self._provider_url))
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI client initialization failed (provider_url={self._provider_url} "
                f"error={exc})"
            )
            raise AssistError(str(exc)) from exc
        return self._client


def normalize_provider_url(provider_url: str) -> str:
    """Normalize an OpenAI provider URL or alias to a base URL.

    Args:
        provider_url: User-provided provider URL or alias.

    Returns:
        Base URL suitable for the OpenAI Python client.

    Raises:
        ValueError: If provider URL is invalid.
    """
    raw = provider_url.strip()
    if not raw:
        raise ValueError("Invalid OpenAI provider URL: value is empty.")
    if raw.lower().rstrip("/") in _OPENAI_HOSTS:
        return OPENAI_DEFAULT_BASE_URL

    candidate = raw if "://" in raw else f"https://{raw}"
    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(
            f"Invalid OpenAI provider URL: expected host URL, got '{provider_url}'."
        )
    if parsed.netloc.lower() in _OPENAI_HOSTS:
        return OPENAI_DEFAULT_BASE_URL
    return candidate.rstrip("/")


def _field(item: object, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _read_reply(response: object) -> tuple[str, str]:
    """Read reply text and any refusal from a Responses API result.

    Args:
        response: SDK response object or its dict form.

    Returns:
        Stripped reply text and stripped refusal text; either may be empty.
    """
    output_text = _field(response, "output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text.strip(), ""

    texts: list[str] = []
    refusals: list[str] = []
    for item in _field(response, "output") or ():
        if _field(item, "type") != "message":
            continue
        for part in _field(item, "content") or ():
            part_type = _field(part, "type")
            if part_type == "output_text" and isinstance(_field(part, "text"), str):
                texts.append(_field(part, "text"))
            elif part_type == "refusal" and isinstance(_field(part, "refusal"), str):
                refusals.append(_field(part, "refusal"))
    return "".join(texts).strip(), " ".join(refusals).strip()
