"""
Server settings, read from the environment at call time so a `.env` loaded
by main.py (or a test's monkeypatch) is always honoured.

    FLOWCODE_DATA_DIR   where saved projects go       (default ./data)
    PORT                uvicorn port                  (default 8787)
"""
from __future__ import annotations

import os
from pathlib import Path

DEFAULT_PORT = 8787


def data_dir() -> Path:
    return Path(os.environ.get("FLOWCODE_DATA_DIR", "data"))


def port() -> int:
    return int(os.environ.get("PORT", DEFAULT_PORT))
