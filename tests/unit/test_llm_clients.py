# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for assistant provider clients."""

from types import SimpleNamespace

import ollama
import openai
import pytest

from sanitizer.assist_client import AssistError
from sanitizer.llm import ollama as ollama_module
from sanitizer.llm.ollama import OllamaClient
from sanitizer.llm.openai_client import (
    OPENAI_DEFAULT_BASE_URL,
    OpenAIClient,
    normalize_provider_url,
)


class _FakeOllama:
    def __init__(self, host: str) -> None:
        self.host = host
        self.calls: list[dict[str, object]] = []
        self.response: object = {"response": "  ```python\nVAR_1\n```  "}
        self.error: Exception | None = None

    def generate(self, **kwargs: object) -> object:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _ollama_client(monkeypatch: pytest.MonkeyPatch) -> tuple[OllamaClient, _FakeOllama]:
    created: list[_FakeOllama] = []

    def factory(host: str) -> _FakeOllama:
        fake = _FakeOllama(host=host)
        created.append(fake)
        return fake

    monkeypatch.setattr(ollama_module.ollama, "Client", factory)
    client = OllamaClient(provider_url="http://localhost:11434", model="codellama")
    return client, created[0]


def test_llm_001_ollama_returns_stripped_generation(monkeypatch: pytest.MonkeyPatch) -> None:
    client, fake = _ollama_client(monkeypatch)

    content = client.complete("prompt text")

    assert content == "```python\nVAR_1\n```"
    assert fake.host == "http://localhost:11434"
    assert fake.calls[0]["model"] == "codellama"
    assert fake.calls[0]["prompt"] == "prompt text"


def test_llm_002_ollama_errors_become_assist_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    client, fake = _ollama_client(monkeypatch)
    fake.error = ollama.ResponseError("model not found")

    with pytest.raises(AssistError):
        client.complete("prompt text")


def test_llm_003_ollama_empty_response_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    client, fake = _ollama_client(monkeypatch)
    fake.response = SimpleNamespace(response="   ")

    with pytest.raises(AssistError):
        client.complete("prompt text")


def test_llm_004_openai_provider_url_aliases_normalize() -> None:
    assert normalize_provider_url("openai") == OPENAI_DEFAULT_BASE_URL
    assert normalize_provider_url("https://api.openai.com/") == OPENAI_DEFAULT_BASE_URL
    assert normalize_provider_url("localhost:8000/v1/") == "https://localhost:8000/v1"
    with pytest.raises(ValueError):
        normalize_provider_url("  ")


def test_llm_005_openai_returns_output_text() -> None:
    calls: list[dict[str, object]] = []

    def create(**kwargs: object) -> object:
        calls.append(kwargs)
        return SimpleNamespace(output_text=" done ")

    client = OpenAIClient(provider_url="openai", model="gpt-test")
    client._client = SimpleNamespace(  # type: ignore[assignment]
        responses=SimpleNamespace(create=create)
    )

    assert client.complete("prompt text") == "done"
    assert calls[0]["model"] == "gpt-test"
    assert calls[0]["input"] == "prompt text"


def test_llm_006_openai_empty_output_is_rejected() -> None:
    client = OpenAIClient(provider_url="openai")
    client._client = SimpleNamespace(  # type: ignore[assignment]
        responses=SimpleNamespace(create=lambda **_: {"output_text": ""})
    )

    with pytest.raises(AssistError):
        client.complete("prompt text")


def _openai_with_response(response: object, calls: list[dict[str, object]]) -> OpenAIClient:
    def create(**kwargs: object) -> object:
        calls.append(kwargs)
        return response

    client = OpenAIClient(provider_url="openai", model="gpt-test", max_output_tokens=256)
    client._client = SimpleNamespace(  # type: ignore[assignment]
        responses=SimpleNamespace(create=create)
    )
    return client


def test_llm_007_openai_reads_message_items_without_output_text() -> None:
    calls: list[dict[str, object]] = []
    response = {
        "output": [
            {"type": "reasoning", "content": []},
            {
                "type": "message",
                "content": [
                    {"type": "output_text", "text": "def FUNC_1():\n"},
                    {"type": "output_text", "text": "    return 1\n"},
                ],
            },
        ]
    }
    client = _openai_with_response(response, calls)

    assert client.complete("prompt text") == "def FUNC_1():\n    return 1"
    assert calls[0]["max_output_tokens"] == 256


def test_llm_008_openai_refusal_is_an_assist_error() -> None:
    response = SimpleNamespace(
        output_text="",
        output=[
            SimpleNamespace(
                type="message",
                content=[SimpleNamespace(type="refusal", refusal="cannot help")],
            )
        ],
    )
    client = _openai_with_response(response, [])

    with pytest.raises(AssistError, match="cannot help"):
        client.complete("prompt text")


def test_llm_009_openai_sdk_errors_become_assist_errors() -> None:
    def create(**_: object) -> object:
        raise openai.OpenAIError("quota exceeded")

    client = OpenAIClient(provider_url="openai")
    client._client = SimpleNamespace(  # type: ignore[assignment]
        responses=SimpleNamespace(create=create)
    )

    with pytest.raises(AssistError, match="quota exceeded"):
        client.complete("prompt text")
