"""Environment-driven settings for the two upstreams.

Values are read once, when ``load_settings`` is called, and then passed
explicitly to the stages. An optional YAML file (``CODEGEN_CONFIG``) overrides
sampling parameters and the retry policy.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Mapping, TypeVar

import yaml

from codegen_relay.common.errors import ConfigError
from codegen_relay.common.schema import RetryPolicy

OPENAI_BASE_URL = "https://api.openai.com/v1"

T = TypeVar("T")


@dataclass(frozen=True)
class UpstreamConfig:
    """Connection and sampling parameters for one chat-completion upstream."""
    name: str
    base_url: str
    api_key: str
    model: str
    temperature: float
    max_tokens: int

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


@dataclass(frozen=True)
class Settings:
    prompt_engineer: UpstreamConfig
    coder: UpstreamConfig
    retry: RetryPolicy
    timeout: float = 120.0
    log_level: str = "INFO"


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _require(env: Mapping[str, str], key: str) -> str:
    value = env.get(key, "").strip()
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


def _base_url(env: Mapping[str, str], key: str, default: str | None = None) -> str:
    """Read a base URL; empty counts as unset. Only http(s) URLs are accepted."""
    value = env.get(key, "").strip() or default
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    if not value.startswith(("http://", "https://")):
        raise ConfigError(f"{key} must start with http:// or https://, got {value!r}")
    return value


def _number(env: Mapping[str, str], key: str, default: str, cast: Callable[[str], T]) -> T:
    raw = env.get(key, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {key}: {raw!r}") from e


def _override(upstream: UpstreamConfig, section: Mapping[str, Any] | None) -> UpstreamConfig:
    if not section:
        return upstream
    return replace(
        upstream,
        model=str(section.get("model", upstream.model)),
        temperature=float(section.get("temperature", upstream.temperature)),
        max_tokens=int(section.get("max_tokens", upstream.max_tokens)),
    )


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        env: Mapping to read from; defaults to ``os.environ``.

    Raises:
        ConfigError: a required credential or URL is missing, or a value is malformed.
    """
    env = os.environ if env is None else env

    prompt_engineer = UpstreamConfig(
        name="OpenAI",
        base_url=_base_url(env, "OPENAI_BASE_URL", OPENAI_BASE_URL),
        api_key=_require(env, "OPENAI_API_KEY"),
        model=env.get("OPENAI_MODEL", "gpt-3.5-turbo"),
        temperature=0.3,
        max_tokens=200,
    )
    coder = UpstreamConfig(
        name="DeepSeek",
        base_url=_base_url(env, "DEEPSEEK_BASE_URL"),
        api_key=_require(env, "DEEPSEEK_API_KEY"),
        model=env.get("DEEPSEEK_MODEL", "deepseek-coder"),
        temperature=0.2,
        max_tokens=2000,
    )
    max_attempts = _number(env, "RETRY_MAX_ATTEMPTS", "3", int)
    base_delay_ms = _number(env, "RETRY_BASE_DELAY_MS", "1000", int)
    timeout = _number(env, "UPSTREAM_TIMEOUT", "120", float)

    cfg_path = env.get("CODEGEN_CONFIG")
    if cfg_path:
        if not Path(cfg_path).exists():
            raise ConfigError(f"Config file not found at {cfg_path}")
        cfg = load_cfg(cfg_path)
        try:
            prompt_engineer = _override(prompt_engineer, cfg.get("prompt_engineer"))
            coder = _override(coder, cfg.get("coder"))
            retry_cfg = cfg.get("retry") or {}
            max_attempts = int(retry_cfg.get("max_attempts", max_attempts))
            base_delay_ms = int(retry_cfg.get("base_delay_ms", base_delay_ms))
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid config file {cfg_path}: {e}") from e

    try:
        retry = RetryPolicy(max_attempts=max_attempts, base_delay_ms=base_delay_ms)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return Settings(
        prompt_engineer=prompt_engineer,
        coder=coder,
        retry=retry,
        timeout=timeout,
        log_level=env.get("LOG_LEVEL", "INFO"),
    )
