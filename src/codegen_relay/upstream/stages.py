"""Prompt refinement and code generation stages over the retrying client."""
from __future__ import annotations
import logging
import time
from typing import Any

from codegen_relay.common.config import UpstreamConfig
from codegen_relay.common.errors import UpstreamParseError
from codegen_relay.common.schema import GenerationRequest, RequestSpec, RetryPolicy
from codegen_relay.common.templates import coder_messages, refinement_messages
from codegen_relay.upstream.retry_client import RetryingHttpClient

LOGGER = logging.getLogger("codegen_relay.upstream.stages")


def _extract_content(data: Any, upstream: str) -> str:
    """Return ``choices[0].message.content`` or raise UpstreamParseError."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamParseError(upstream, f"missing choices[0].message.content ({e!r})") from e
    if not isinstance(content, str):
        raise UpstreamParseError(upstream, "choices[0].message.content is not a string")
    return content


class _ChatStage:
    def __init__(
        self,
        client: RetryingHttpClient,
        upstream: UpstreamConfig,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.client = client
        self.upstream = upstream
        self.policy = policy or RetryPolicy()

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        spec = RequestSpec(
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.upstream.api_key}",
            },
            json={
                "model": self.upstream.model,
                "messages": messages,
                "temperature": self.upstream.temperature,
                "max_tokens": self.upstream.max_tokens,
            },
        )
        start = time.time()
        resp = await self.client.call(self.upstream.url, spec, self.policy, upstream=self.upstream.name)
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamParseError(self.upstream.name, "response body is not JSON") from e
        content = _extract_content(data, self.upstream.name)
        LOGGER.info("%s (%s) answered in %dms", self.upstream.name, self.upstream.model,
                    int((time.time() - start) * 1000))
        return content


class PromptRefinementStage(_ChatStage):
    """Turns a raw user requirement into a code-generation prompt."""

    async def refine(self, request: GenerationRequest) -> str:
        content = await self._complete(refinement_messages(request))
        return content.strip()


class CodeGenerationStage(_ChatStage):
    """Generates code from a refined prompt. Output is returned verbatim."""

    async def generate(self, refined_prompt: str) -> str:
        return await self._complete(coder_messages(refined_prompt))
