import base64
import json
from types import SimpleNamespace

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from flowcode.generator.client import CodeGenerator, GeneratedProgram, GenerationError
from flowcode.server.main import app
from flowcode.server.routes.graph_routes import get_generator
from flowcode.server.storage import safe_name

FLOW = {
    "nodes": [
        {"id": "s", "type": "start", "data": {}},
        {"id": "o", "type": "output", "data": {"value": "sqrt(4)"}},
    ],
    "edges": [{"id": "e1", "source": "s", "target": "o", "sourceHandle": None}],
}


class StubGenerator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.prompts = []
        self.languages = []

    def generate(self, prompt_pack, language=None):
        self.prompts.append(prompt_pack)
        self.languages.append(language)
        if self.error:
            raise self.error
        return self.result


class TestServer:

    @pytest.fixture
    def client(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FLOWCODE_DATA_DIR", str(tmp_path))
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_compile(self, client):
        response = client.post("/api/compile", json=FLOW)
        assert response.status_code == 200
        code = response.json()["code"]
        assert code.startswith("import math\n")
        assert "    print(math.sqrt(4))" in code

    def test_compile_without_start(self, client):
        response = client.post("/api/compile", json={"nodes": [], "edges": []})
        assert response.json() == {"code": "# No Start node found"}

    def test_compile_schema_error(self, client):
        response = client.post("/api/compile", json={"nodes": [{"type": "start"}], "edges": []})
        assert response.status_code == 400
        assert "missing required field 'id'" in response.json()["detail"]

    def test_compile_strict_rejects_unknown_types(self, client):
        body = {"nodes": [{"id": "x", "type": "domain"}], "edges": [], "strict": True}
        assert client.post("/api/compile", json=body).status_code == 400

    def test_compile_requires_nodes(self, client):
        assert client.post("/api/compile", json={"edges": []}).status_code == 422

    def test_prompt_pack(self, client):
        response = client.post("/api/prompt-pack", json={**FLOW, "language": "rust"})
        assert response.status_code == 200
        assert '"language": "rust"' in response.json()["promptPack"]

    def test_generate_code(self, client):
        stub = StubGenerator(GeneratedProgram(language="python", files=[{"path": "a.py", "content": "x = 1"}]))
        app.dependency_overrides[get_generator] = lambda: stub
        response = client.post("/api/generate-code", json={"promptPack": "PROMPT"})
        assert response.status_code == 200
        assert response.json()["files"] == [{"path": "a.py", "content": "x = 1"}]
        assert stub.prompts == ["PROMPT"]
        assert stub.languages == ["python"]

    def test_generate_code_forwards_language(self, client):
        stub = StubGenerator(GeneratedProgram(language="c"))
        app.dependency_overrides[get_generator] = lambda: stub
        client.post("/api/generate-code", json={"promptPack": "PROMPT", "language": "c"})
        assert stub.languages == ["c"]

    def test_generate_code_service_unreachable(self, client):
        failure = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        def create(**kwargs):
            raise failure

        completions = SimpleNamespace(create=create)
        generator = CodeGenerator(client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))
        app.dependency_overrides[get_generator] = lambda: generator
        response = client.post("/api/generate-code", json={"promptPack": "PROMPT"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Connection error."

    def test_generate_code_blank_prompt(self, client):
        app.dependency_overrides[get_generator] = lambda: StubGenerator()
        assert client.post("/api/generate-code", json={"promptPack": "  "}).status_code == 400

    def test_generate_code_bad_reply(self, client):
        stub = StubGenerator(error=GenerationError("Model did not return valid JSON.", raw="oops"))
        app.dependency_overrides[get_generator] = lambda: stub
        response = client.post("/api/generate-code", json={"promptPack": "PROMPT"})
        assert response.status_code == 502
        assert response.json()["detail"]["raw"] == "oops"

    def test_generate_code_missing_key(self, client):
        stub = StubGenerator(error=GenerationError("Missing OPENAI_API_KEY in environment"))
        app.dependency_overrides[get_generator] = lambda: stub
        assert client.post("/api/generate-code", json={"promptPack": "PROMPT"}).status_code == 500

    def test_save_project(self, client, tmp_path):
        png = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
        response = client.post("/api/save-project", json={
            "project": "My Project!",
            "flow": FLOW,
            "promptPack": "PROMPT",
            "pngDataUrl": png,
            "generated": {"language": "python", "files": []},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True

        saved = tmp_path / "My_Project_"
        [stamp_dir] = list(saved.iterdir())
        assert str(stamp_dir) == body["dir"]
        assert json.loads((stamp_dir / "flow.json").read_text()) == FLOW
        assert "print(math.sqrt(4))" in (stamp_dir / "program.py").read_text()
        assert (stamp_dir / "prompt.txt").read_text() == "PROMPT"
        assert json.loads((stamp_dir / "generated.json").read_text())["language"] == "python"
        assert (stamp_dir / "diagram.png").read_bytes() == b"\x89PNG fake"

    def test_save_project_minimal(self, client, tmp_path):
        response = client.post("/api/save-project", json={"flow": FLOW})
        assert response.status_code == 200
        [stamp_dir] = list((tmp_path / "project").iterdir())
        assert sorted(p.name for p in stamp_dir.iterdir()) == ["flow.json", "program.py"]

    def test_save_project_requires_flow(self, client):
        assert client.post("/api/save-project", json={"project": "p"}).status_code == 422


class TestStorage:

    def test_safe_name(self):
        assert safe_name("a b/c..d") == "a_b_c__d"
        assert safe_name(None) == "project"
        assert safe_name("") == "project"
        assert len(safe_name("x" * 100)) == 60
