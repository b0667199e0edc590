"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


@dataclass(frozen=True)
class GenerationRequest:
    """User requirement forwarded to the prompt-engineer upstream."""
    prompt: str
    language: str
    task_type: str


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff base for one upstream call.

    Delay before retry ``i`` (0-based) is ``base_delay_ms * 2**i``.
    ``max_attempts=1`` disables retrying.
    """
    max_attempts: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")

    def delay_ms(self, attempt: int) -> int:
        return self.base_delay_ms * 2 ** attempt


@dataclass(frozen=True)
class RequestSpec:
    """A fully formed upstream request."""
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    json: dict[str, Any] | None = None


class GenerationResponse(BaseModel):
    success: bool
    prompt: str | None = None
    code: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, prompt: str, code: str) -> "GenerationResponse":
        return cls(success=True, prompt=prompt, code=code)

    @classmethod
    def failed(cls, error: str) -> "GenerationResponse":
        return cls(success=False, error=error)

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
