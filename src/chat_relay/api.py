from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from chat_relay.bootstrap import AppRuntime
from chat_relay.errors import MissingInputError, StoreError


class ChatRequest(BaseModel):
    prompt: str | None = Field(default=None, description="User's latest message")
    uid: str | None = Field(default=None, description="Identity whose history the turn belongs to")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def create_app(runtime: AppRuntime) -> FastAPI:
    app = FastAPI(title="chat-relay", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def chat(req: ChatRequest) -> Any:
        try:
            reply = await runtime.chat_service.handle(req.uid, req.prompt)
        except MissingInputError as ex:
            return JSONResponse(status_code=400, content={"success": False, "message": str(ex)})
        return reply.to_dict()

    app.add_api_route("/api/chat", chat, methods=["POST"])
    # Path used by existing web clients.
    app.add_api_route("/api/gemini", chat, methods=["POST"])

    @app.get("/api/history/{uid}")
    async def history(uid: str) -> Any:
        try:
            turns = runtime.chat_log.list_ordered(uid)
        except StoreError as ex:
            with logger.contextualize(uid=uid):
                logger.error(f"History read failed: {ex}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(ex)})
        return {
            "success": True,
            "history": [
                {"role": t.role, "text": t.text, "timestamp": t.created_at}
                for t in turns
            ],
        }

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {
            "status": "OK",
            "message": "Server is running",
            "port": runtime.config.port,
            "timestamp": _now_iso(),
        }

    @app.get("/api/debug")
    def debug() -> dict[str, Any]:
        return {
            "serverTime": _now_iso(),
            "port": runtime.config.port,
            "provider": runtime.config.provider_name,
            "model": runtime.config.model,
            "demoMode": runtime.invoker.demo_mode,
        }

    return app
