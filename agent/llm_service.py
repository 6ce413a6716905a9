# agent/llm_service.py
"""
DemandCast generation service.

POST /generate {"prompt": str, "schema": object?} -> {"text": str}

When a schema is given the model is told to answer with one JSON object
matching it; the caller still validates the reply. The model itself lives in
agent/local_model.py and is imported on first use.
"""
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from demandcast.config import (
    ADAPTER_PATH,
    BASE_MODEL,
    LLM_HOST,
    LLM_PORT,
    MAX_NEW_TOKENS,
    PRELOAD_MODEL,
    TEMPERATURE,
    configure_logging,
)

logger = logging.getLogger(__name__)

SYSTEM = "You are a careful assistant for an electricity demand forecasting dashboard."
JSON_SYSTEM = SYSTEM + " Reply with a single JSON object and nothing else: no prose, no markdown fences."


def build_instructions(prompt: str, schema: Optional[dict]):
    """Return (system, user) text for one request."""
    if not schema:
        return SYSTEM, prompt
    user = (
        f"{prompt}\n\n"
        "Your reply must be a JSON object that validates against this JSON schema:\n"
        f"{json.dumps(schema, ensure_ascii=False)}"
    )
    return JSON_SYSTEM, user


def _generate_text(system: str, user: str) -> str:
    from agent import local_model
    return local_model.generate_text(system, user)


def _model_loaded() -> bool:
    import sys
    mod = sys.modules.get("agent.local_model")
    return bool(mod and mod.is_loaded())


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if PRELOAD_MODEL:
        from agent import local_model
        local_model.load_once()
    yield


app = FastAPI(title="DemandCast LLM Service", lifespan=lifespan)


@app.get("/health")
def health():
    return {
        "ok": True,
        "base_model": BASE_MODEL,
        "adapter": ADAPTER_PATH,
        "loaded": _model_loaded(),
        "max_new_tokens": MAX_NEW_TOKENS,
        "temperature": TEMPERATURE,
    }


@app.post("/generate")
async def generate(req: Request):
    try:
        data = await req.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Body must be JSON."})
    if not isinstance(data, dict):
        return JSONResponse(status_code=400, content={"error": "Body must be a JSON object."})

    prompt = (data.get("prompt") or "").strip()
    if not prompt:
        return JSONResponse(content={"text": ""})

    schema = data.get("schema")
    system, user = build_instructions(prompt, schema if isinstance(schema, dict) else None)
    try:
        text = _generate_text(system, user)
    except Exception as e:
        logger.error(f"Generation failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": f"Generation failed: {e}"})
    return {"text": text}


# -------------------------------
# __main__ (uvicorn runner)
# -------------------------------

if __name__ == "__main__":
    import uvicorn

    configure_logging()
    print(f"[llm] Starting FastAPI on http://{LLM_HOST}:{LLM_PORT}")
    uvicorn.run(app, host=LLM_HOST, port=LLM_PORT, reload=False)
