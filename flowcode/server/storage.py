"""
Project persistence.

Each save lands in its own timestamped directory:

    <data_dir>/<project>/<timestamp>/
        flow.json        graph as received from the editor
        program.py       compile_graph() output
        prompt.txt       prompt pack, when supplied
        generated.json   remote generation result, when supplied
        diagram.png      editor snapshot, when supplied as a PNG data URL
"""
from __future__ import annotations

import base64
import binascii
import datetime
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_PNG_PREFIX = "data:image/png;base64,"
_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")


def safe_name(name: Optional[str]) -> str:
    """Turn a user project name into a single safe path segment."""
    return _UNSAFE.sub("_", str(name or "project"))[:60]


def _timestamp() -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    return re.sub(r"[:.+]", "-", now.isoformat())


def save_project(
    root: Path,
    project: Optional[str],
    flow: Dict[str, Any],
    program: Optional[str] = None,
    prompt_pack: Optional[str] = None,
    generated: Optional[Dict[str, Any]] = None,
    png_data_url: Optional[str] = None,
) -> Path:
    target = Path(root) / safe_name(project) / _timestamp()
    target.mkdir(parents=True, exist_ok=True)

    (target / "flow.json").write_text(json.dumps(flow, indent=2), encoding="utf-8")

    if program is not None:
        (target / "program.py").write_text(program, encoding="utf-8")

    if isinstance(prompt_pack, str):
        (target / "prompt.txt").write_text(prompt_pack, encoding="utf-8")

    if generated:
        (target / "generated.json").write_text(json.dumps(generated, indent=2), encoding="utf-8")

    if isinstance(png_data_url, str) and png_data_url.startswith(_PNG_PREFIX):
        try:
            png = base64.b64decode(png_data_url[len(_PNG_PREFIX):], validate=True)
        except binascii.Error:
            logger.warning(f"Ignoring malformed diagram data for project '{project}'")
        else:
            (target / "diagram.png").write_bytes(png)

    logger.info(f"Saved project '{project}' to {target}")
    return target
