"""
Graph REST routes.

All routes are mounted under /api by main.py.

    POST /compile         flowchart JSON → Python source
    POST /prompt-pack     flowchart JSON → prompt text for the generation service
    POST /generate-code   prompt text    → generated multi-file program
    POST /save-project    persist flow, compiled program and artifacts
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from flowcode.compiler import compile_graph
from flowcode.compiler.deserialiser import json_to_graph
from flowcode.compiler.schema import SchemaError, validate
from flowcode.generator.client import CodeGenerator, GeneratedProgram, GenerationError
from flowcode.prompt_pack import make_prompt_pack
from flowcode.server import config
from flowcode.server.storage import save_project as store_project

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request bodies ────────────────────────────────────────────────────────────

class FlowBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]] = Field(default_factory=list)

    def as_graph_json(self) -> Dict[str, Any]:
        return {"nodes": self.nodes, "edges": self.edges}


class CompileBody(FlowBody):
    strict: bool = False


class PromptPackBody(FlowBody):
    language: str = "python"


class GenerateBody(BaseModel):
    promptPack: str
    language: str = "python"


class SaveProjectBody(BaseModel):
    project: str = "project"
    flow: FlowBody
    promptPack: Optional[str] = None
    pngDataUrl: Optional[str] = None
    generated: Optional[Dict[str, Any]] = None


def _load_graph(flow: FlowBody, strict: bool = False):
    data = flow.as_graph_json()
    try:
        validate(data, strict=strict)
    except SchemaError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return json_to_graph(data)


def get_generator() -> CodeGenerator:
    return CodeGenerator()


# ── POST /compile ─────────────────────────────────────────────────────────────

@router.post("/compile")
async def compile_flow(body: CompileBody) -> Dict[str, Any]:
    graph = _load_graph(body, strict=body.strict)
    return {"code": compile_graph(graph)}


# ── POST /prompt-pack ─────────────────────────────────────────────────────────

@router.post("/prompt-pack")
async def prompt_pack(body: PromptPackBody) -> Dict[str, Any]:
    graph = _load_graph(body)
    return {"promptPack": make_prompt_pack(graph, body.language)}


# ── POST /generate-code ───────────────────────────────────────────────────────

@router.post("/generate-code", response_model=GeneratedProgram)
def generate_code(body: GenerateBody, generator: CodeGenerator = Depends(get_generator)) -> GeneratedProgram:
    if not body.promptPack.strip():
        raise HTTPException(status_code=400, detail="Missing promptPack")
    try:
        return generator.generate(body.promptPack, language=body.language)
    except GenerationError as exc:
        if exc.raw is None:
            raise HTTPException(status_code=500, detail=str(exc))
        raise HTTPException(status_code=502, detail={"error": str(exc), "raw": exc.raw})


# ── POST /save-project ────────────────────────────────────────────────────────

@router.post("/save-project")
async def save_project(body: SaveProjectBody) -> Dict[str, Any]:
    graph = _load_graph(body.flow)
    try:
        target = store_project(
            config.data_dir(),
            body.project,
            body.flow.as_graph_json(),
            program=compile_graph(graph),
            prompt_pack=body.promptPack,
            generated=body.generated,
            png_data_url=body.pngDataUrl,
        )
    except OSError as exc:
        logger.error(f"Saving project '{body.project}' failed: {exc}")
        raise HTTPException(status_code=500, detail=str(exc))
    return {"ok": True, "dir": str(target)}
