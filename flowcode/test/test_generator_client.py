import json
from types import SimpleNamespace

import httpx
import openai
import pytest
from pydantic import ValidationError

from flowcode.generator.client import CodeGenerator, GenerationError, parse_reply


class StubCompletions:
    def __init__(self, content, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(content, error=None):
    completions = StubCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


REPLY = {
    "language": "python",
    "files": [{"path": "main.py", "content": "print('hi')\n"}],
    "notes": "one file",
}


class TestParseReply:

    def test_strict_json(self):
        assert parse_reply(json.dumps(REPLY)) == REPLY

    def test_json_wrapped_in_prose(self):
        text = "Here you go:\n```json\n" + json.dumps(REPLY) + "\n```\nEnjoy."
        assert parse_reply(text) == REPLY

    def test_garbage(self):
        with pytest.raises(GenerationError) as info:
            parse_reply("no json here")
        assert info.value.raw == "no json here"


class TestCodeGenerator:

    def test_generate(self):
        client, completions = stub_client(json.dumps(REPLY))
        program = CodeGenerator(client=client, model="test-model").generate("PROMPT")
        assert program.language == "python"
        assert program.files[0].path == "main.py"
        assert completions.calls[0]["model"] == "test-model"
        assert completions.calls[0]["messages"] == [{"role": "user", "content": "PROMPT"}]

    def test_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("FLOWCODE_MODEL", "env-model")
        assert CodeGenerator(client=object()).model == "env-model"

    def test_schema_mismatch(self):
        client, _ = stub_client(json.dumps({"files": "not a list"}))
        with pytest.raises(GenerationError, match="expected schema"):
            CodeGenerator(client=client).generate("PROMPT")

    def test_blank_prompt(self):
        client, completions = stub_client("{}")
        with pytest.raises(GenerationError, match="Missing prompt pack"):
            CodeGenerator(client=client).generate("   ")
        assert completions.calls == []

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(GenerationError, match="OPENAI_API_KEY"):
            CodeGenerator().generate("PROMPT")

    def test_language_fills_missing_field(self):
        client, _ = stub_client(json.dumps({"files": []}))
        assert CodeGenerator(client=client).generate("PROMPT", language="c").language == "c"

    def test_language_does_not_override_reply(self):
        client, _ = stub_client(json.dumps(REPLY))
        assert CodeGenerator(client=client).generate("PROMPT", language="c").language == "python"

    def test_service_error_becomes_generation_error(self):
        failure = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        client, _ = stub_client("", error=failure)
        with pytest.raises(GenerationError, match="Connection error") as info:
            CodeGenerator(client=client).generate("PROMPT")
        assert info.value.raw is None
        assert info.value.__cause__ is failure

    def test_schema_mismatch_keeps_cause(self):
        client, _ = stub_client(json.dumps({"files": "not a list"}))
        with pytest.raises(GenerationError) as info:
            CodeGenerator(client=client).generate("PROMPT")
        assert isinstance(info.value.__cause__, ValidationError)
