from __future__ import annotations

from typing import Any

import pytest

from codegen_relay.common.config import Settings, UpstreamConfig
from codegen_relay.common.schema import RetryPolicy


def chat_payload(content: Any) -> dict[str, Any]:
    return {
        "choices": [
            {"message": {"role": "assistant", "content": content}, "index": 0}
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays (seconds)."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        prompt_engineer=UpstreamConfig(
            name="OpenAI",
            base_url="https://openai.test/v1",
            api_key="sk-openai-test",
            model="gpt-3.5-turbo",
            temperature=0.3,
            max_tokens=200,
        ),
        coder=UpstreamConfig(
            name="DeepSeek",
            base_url="https://deepseek.test/v1",
            api_key="sk-deepseek-test",
            model="deepseek-coder",
            temperature=0.2,
            max_tokens=2000,
        ),
        retry=RetryPolicy(max_attempts=3, base_delay_ms=1000),
        timeout=5.0,
    )


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()
