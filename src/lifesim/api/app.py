"""FastAPI app: the two model-backed routes plus a health check."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lifesim.assistant.service import ApiError, AssistantService

logger = logging.getLogger(__name__)


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ApiError(400, "Invalid JSON body") from e


async def _respond(handler: Callable[[], Awaitable[dict[str, Any]]], route: str) -> JSONResponse:
    try:
        return JSONResponse(await handler())
    except ApiError as e:
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except Exception:
        logger.exception("%s failed", route)
        return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(service: AssistantService | None = None) -> FastAPI:
    service = service or AssistantService()
    app = FastAPI(title="life-sim")

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/api/assistant")
    async def assistant(request: Request) -> JSONResponse:
        async def handler() -> dict[str, Any]:
            reply = await service.chat(await _json_body(request))
            return reply.to_response()

        return await _respond(handler, "/api/assistant")

    @app.post("/api/import")
    async def import_data(request: Request) -> JSONResponse:
        async def handler() -> dict[str, Any]:
            reply = await service.import_data(await _json_body(request))
            return reply.to_response()

        return await _respond(handler, "/api/import")

    return app


app = create_app()
