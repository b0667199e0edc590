"""Framework-independent /generate handler: validate, refine, generate, respond."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from codegen_relay.common.config import Settings
from codegen_relay.common.errors import CodegenError, MethodNotAllowedError, ValidationError
from codegen_relay.common.schema import GenerationRequest, GenerationResponse
from codegen_relay.upstream.retry_client import RetryingHttpClient, Sleep
from codegen_relay.upstream.stages import CodeGenerationStage, PromptRefinementStage

LOGGER = logging.getLogger("codegen_relay.serve.handler")

REQUIRED_FIELDS = ("prompt", "language", "taskType")


@dataclass
class HandlerResult:
    status_code: int
    response: GenerationResponse | None = None


def parse_request(body: Any) -> GenerationRequest:
    """Build a GenerationRequest from a decoded JSON body, or raise ValidationError."""
    if not isinstance(body, dict):
        raise ValidationError()
    values = [body.get(name) for name in REQUIRED_FIELDS]
    if not all(isinstance(v, str) and v for v in values):
        raise ValidationError()
    prompt, language, task_type = values
    return GenerationRequest(prompt=prompt, language=language, task_type=task_type)


class RequestHandler:
    def __init__(self, refiner: PromptRefinementStage, coder: CodeGenerationStage) -> None:
        self.refiner = refiner
        self.coder = coder

    async def handle(self, method: str, body: Any = None) -> HandlerResult:
        method = method.upper()
        if method == "OPTIONS":
            return HandlerResult(200)
        try:
            if method != "POST":
                raise MethodNotAllowedError(method)
            request = parse_request(body)
        except CodegenError as e:
            return HandlerResult(e.status_code, GenerationResponse.failed(str(e)))

        try:
            refined = await self.refiner.refine(request)
            code = await self.coder.generate(refined)
        except Exception as e:
            kind = e.kind.value if isinstance(e, CodegenError) else "internal"
            LOGGER.exception("Error in generate API [%s]", kind)
            return HandlerResult(500, GenerationResponse.failed(str(e) or "Internal server error"))

        return HandlerResult(200, GenerationResponse.ok(prompt=refined, code=code))


def build_handler(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleep | None = None,
) -> RequestHandler:
    """Wire both stages to one retrying client configured from ``settings``."""
    kwargs: dict[str, Any] = {"timeout": settings.timeout, "transport": transport}
    if sleep is not None:
        kwargs["sleep"] = sleep
    client = RetryingHttpClient(**kwargs)
    return RequestHandler(
        refiner=PromptRefinementStage(client, settings.prompt_engineer, settings.retry),
        coder=CodeGenerationStage(client, settings.coder, settings.retry),
    )
