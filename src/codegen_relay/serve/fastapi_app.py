"""FastAPI front for the two-stage code generation chain.

Endpoints:
- GET /health
- OPTIONS /generate  (CORS preflight)
- POST /generate  { "prompt": "...", "language": "...", "taskType": "..." }
"""
from __future__ import annotations
import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from codegen_relay.common.config import load_settings
from codegen_relay.common.logging_setup import setup_logging
from codegen_relay.common.schema import GenerationResponse
from codegen_relay.serve.handler import RequestHandler, build_handler

LOGGER = logging.getLogger("codegen_relay.serve.app")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

GENERATE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def _read_json(request: Request) -> Any:
    """Decode the body; anything unreadable counts as an empty request."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        LOGGER.info("Ignoring non-JSON request body (%d bytes)", len(raw))
        return None


def create_app(handler: RequestHandler | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        handler: Pre-built handler. When omitted it is built from the
            environment on startup, so missing credentials fail the deploy.
    """
    app = FastAPI(title="Codegen Relay")
    app.state.handler = handler
    app.state.models = {}

    @app.on_event("startup")
    def _configure_on_startup() -> None:
        if app.state.handler is not None:
            return
        settings = load_settings()
        setup_logging(settings.log_level)
        app.state.handler = build_handler(settings)
        app.state.models = {
            "prompt_model": settings.prompt_engineer.model,
            "code_model": settings.coder.model,
        }
        LOGGER.info("Configured upstreams: %s", app.state.models)

    @app.exception_handler(StarletteHTTPException)
    async def _method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
        # methods outside GENERATE_METHODS are rejected by the router itself
        if exc.status_code == 405 and request.url.path == "/generate":
            return JSONResponse(
                content=GenerationResponse.failed("Method not allowed").to_body(),
                status_code=405,
                headers=CORS_HEADERS,
            )
        return await http_exception_handler(request, exc)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", **app.state.models}

    @app.api_route("/generate", methods=GENERATE_METHODS)
    async def generate(request: Request) -> Response:
        body = await _read_json(request) if request.method == "POST" else None
        result = await app.state.handler.handle(request.method, body)
        if result.response is None:
            return Response(status_code=result.status_code, headers=CORS_HEADERS)
        return JSONResponse(
            content=result.response.to_body(),
            status_code=result.status_code,
            headers=CORS_HEADERS,
        )

    return app


app = create_app()
