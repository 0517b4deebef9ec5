"""
Remote code generation client.

Sends a prompt pack (see flowcode.prompt_pack) to an OpenAI chat model and
parses the strict-JSON reply:

    {"language": "python",
     "files": [{"path": "main.py", "content": "..."}],
     "notes": "..."}

Models sometimes wrap the JSON in prose or code fences; the first {...}
object in the reply is used when the whole reply does not parse.

Environment:
    OPENAI_API_KEY   required
    FLOWCODE_MODEL   optional, default gpt-4o-mini
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class GenerationError(RuntimeError):
    """Raised when the generation service cannot be reached or replies badly."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class GeneratedFile(BaseModel):
    path: str
    content: str = ""


class GeneratedProgram(BaseModel):
    language: str = ""
    files: List[GeneratedFile] = Field(default_factory=list)
    notes: str = ""


def parse_reply(text: str) -> Dict[str, Any]:
    """Parse the model reply, falling back to the first {...} block."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = _JSON_OBJECT.search(text or "")
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass

    raise GenerationError("Model did not return valid JSON.", raw=text)


class CodeGenerator:
    def __init__(self, client: Any = None, model: Optional[str] = None):
        self.model = model or os.environ.get("FLOWCODE_MODEL", DEFAULT_MODEL)
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not os.environ.get("OPENAI_API_KEY"):
                raise GenerationError("Missing OPENAI_API_KEY in environment")
            self._client = OpenAI()
        return self._client

    def generate(self, prompt_pack: str, language: Optional[str] = None) -> GeneratedProgram:
        """Run the prompt pack through the model; `language` fills a reply that omits it."""
        if not prompt_pack or not prompt_pack.strip():
            raise GenerationError("Missing prompt pack")

        logger.info(f"Requesting generated program from model '{self.model}'")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt_pack}],
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error(f"Generation request to '{self.model}' failed: {exc}")
            raise GenerationError(str(exc)) from exc
        text = response.choices[0].message.content or ""

        parsed = parse_reply(text)
        try:
            program = GeneratedProgram.model_validate(parsed)
        except ValidationError as exc:
            raise GenerationError(f"Reply does not match the expected schema: {exc}", raw=text) from exc

        if not program.language and language:
            program.language = language
        return program


__all__ = ["CodeGenerator", "GeneratedFile", "GeneratedProgram", "GenerationError", "parse_reply"]
