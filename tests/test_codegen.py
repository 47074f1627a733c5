"""
Tests for code generation
"""

from types import SimpleNamespace

import pytest

from codegen import generator
from codegen.generator import GenerationError, extract_code_block, generate_code


class FakeMessages:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeClient:
    def __init__(self, reply=None, error=None):
        self.messages = FakeMessages(reply, error)


def test_extracts_first_fenced_block():
    reply = "Here you go:\n```python\nprint('a')\n```\nand also\n```python\nprint('b')\n```"

    assert extract_code_block(reply) == "print('a')"


def test_fence_without_language():
    assert extract_code_block("```\nint x = 1;\n```") == "int x = 1;"


def test_single_line_fence():
    assert extract_code_block("```console.log(1)```") == "console.log(1)"


def test_reply_without_fence_is_trimmed():
    assert extract_code_block("  print('raw')\n\n") == "print('raw')"


def test_generate_code_sends_prompt():
    client = FakeClient("```c\nint main(void) { return 0; }\n```")

    code = generate_code("return zero", "c", client=client)

    assert code == "int main(void) { return 0; }"
    call = client.messages.calls[0]
    assert call["messages"][0]["content"] == "Generate c code for the following task: return zero"
    assert call["model"] == generator.DEFAULT_MODEL


def test_model_can_be_configured(monkeypatch):
    monkeypatch.setenv("CODEGEN_MODEL", "claude-custom")
    client = FakeClient("x")

    generate_code("q", "python", client=client)

    assert client.messages.calls[0]["model"] == "claude-custom"


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("CLAUDE_API_KEY", raising=False)

    with pytest.raises(GenerationError, match="CLAUDE_API_KEY"):
        generate_code("q", "python")


def test_api_failure_is_wrapped():
    client = FakeClient(error=RuntimeError("overloaded"))

    with pytest.raises(GenerationError, match="overloaded"):
        generate_code("q", "python", client=client)
