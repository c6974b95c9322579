import logging
import os
import time
import uuid
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sitegen import llm_client, llm_parsing, llm_prompts


if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

GENERATION_FAILED = {"error": "Failed to generate website"}


app = FastAPI(title="Website Generator")

allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Credentials are read once; the same client instance serves every request
app.state.chat_client = llm_client.OpenAIChatClient.from_env()


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = str(uuid.uuid4())
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid,
            request.method,
            request.url.path,
            getattr(response, "status_code", "?"),
            dur_ms,
        )


class FeatureFlags(BaseModel):
    # any JSON value; read by truthiness when the prompt is built
    darkMode: Any = False
    animations: Any = False
    responsive: Any = False
    forms: Any = False
    seo: Any = False


class GenerateRequest(BaseModel):
    prompt: Any = Field("", description="Free-text description of the website to build")
    features: FeatureFlags


def get_chat_client(request: Request) -> llm_client.ChatClient:
    return request.app.state.chat_client


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/llm/status")
def llm_status_endpoint(chat_client: llm_client.ChatClient = Depends(get_chat_client)) -> Dict[str, Any]:
    status = getattr(chat_client, "status", None)
    if callable(status):
        return status()
    return {"provider": None, "model": None, "has_token": False}


@app.post("/api/generate")
async def generate_endpoint(
    request: Request,
    chat_client: llm_client.ChatClient = Depends(get_chat_client),
):
    """
    Build the prompt, make one chat-completion call and normalize the reply.
    Any failure, including a malformed body, maps to the same generic 500.
    """
    try:
        req = GenerateRequest.model_validate(await request.json())
        instruction = llm_prompts.build_instruction(req.prompt, req.features)
        # blocking upstream call runs in the threadpool so other requests keep flowing
        reply = await run_in_threadpool(chat_client.complete, instruction.as_messages())
        result = llm_parsing.normalize_reply(reply)
        log.info(
            "generate: rid=%s strategy=%s",
            getattr(request.state, "request_id", "-"),
            result.strategy.value,
        )
        return JSONResponse(result.site)
    except Exception:
        log.exception("Generation error")
        return JSONResponse(status_code=500, content=GENERATION_FAILED)
