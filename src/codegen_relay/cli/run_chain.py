"""Run the refine-then-generate chain once from the command line."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
import time

from codegen_relay.common.config import Settings, load_settings
from codegen_relay.common.errors import CodegenError
from codegen_relay.common.logging_setup import setup_logging
from codegen_relay.common.schema import GenerationResponse
from codegen_relay.serve.handler import build_handler

LOGGER = logging.getLogger("codegen_relay.cli")


async def run_chain(settings: Settings, prompt: str, language: str, task_type: str) -> GenerationResponse:
    """
    Refine ``prompt`` and generate code with the configured upstreams.

    Args:
        settings: Upstream configuration from ``load_settings``.
        prompt: User requirement.
        language: Target programming language.
        task_type: Kind of code to produce, e.g. "function".
    """
    handler = build_handler(settings)
    body = {"prompt": prompt, "language": language, "taskType": task_type}
    result = await handler.handle("POST", body)
    return result.response or GenerationResponse.failed("Internal server error")


def main(argv: list[str] | None = None) -> int:
    setup_logging(logging.INFO)
    ap = argparse.ArgumentParser(description="Generate code through the two-stage LLM chain")
    ap.add_argument("--prompt", required=True, help="What the code should do")
    ap.add_argument("--language", required=True, help="Programming language")
    ap.add_argument("--task-type", required=True, help="Task type, e.g. function or class")
    args = ap.parse_args(argv)

    try:
        settings = load_settings()
    except CodegenError as e:
        LOGGER.error("%s", e)
        return 1
    setup_logging(settings.log_level)

    start = time.time()
    resp = asyncio.run(run_chain(settings, args.prompt, args.language, args.task_type))
    LOGGER.info("Latency: %sms", int((time.time() - start) * 1000))

    if not resp.success:
        LOGGER.error("Generation failed: %s", resp.error)
        return 1
    LOGGER.info("Refined prompt: %s", resp.prompt)
    print(resp.code)
    return 0


if __name__ == "__main__":
    sys.exit(main())
