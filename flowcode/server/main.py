"""
flowcode FastAPI server.

Start with:
    python -m flowcode.server.main

Or via uvicorn directly:
    uvicorn flowcode.server.main:app --port 8787 --reload
"""
from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowcode import __version__
from flowcode.server import config
from flowcode.server.routes.graph_routes import router

# OPENAI_API_KEY, FLOWCODE_DATA_DIR etc. may live in a local .env file.
load_dotenv()

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="flowcode API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logger.info(f"flowcode API listening on port {config.port()}")
    uvicorn.run("flowcode.server.main:app", host="0.0.0.0", port=config.port())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    run()
