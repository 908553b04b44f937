"""Attune local profiler. Start the server with: python app.py"""

import logging

import uvicorn
from fastapi import FastAPI

from attune.api.routes import router, load_config, init_engine

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("attune")

# ── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(title="Attune", version="0.1.0")

app.include_router(router)


# ── Startup ──────────────────────────────────────────────────────────────────

@app.on_event("startup")
async def startup():
    config = load_config()
    engine = init_engine(config)
    logger.info("Session engine ready (mode=%s, profile=%s)", engine.mode.value, engine.get_profile().value)


# ── Run ──────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    server = load_config().get("server", {})
    uvicorn.run(
        "app:app",
        host=server.get("host", "127.0.0.1"),
        port=server.get("port", 8000),
        reload=server.get("reload", False),
    )
