from __future__ import annotations

import pytest

from codegen_relay.common.config import load_settings
from codegen_relay.common.errors import ConfigError

BASE_ENV = {
    "OPENAI_API_KEY": "sk-openai",
    "DEEPSEEK_API_KEY": "sk-deepseek",
    "DEEPSEEK_BASE_URL": "https://api.deepseek.test/v1/",
}


def test_defaults() -> None:
    s = load_settings(BASE_ENV)
    assert s.prompt_engineer.url == "https://api.openai.com/v1/chat/completions"
    assert s.prompt_engineer.model == "gpt-3.5-turbo"
    assert s.prompt_engineer.temperature == 0.3
    assert s.prompt_engineer.max_tokens == 200
    assert s.coder.url == "https://api.deepseek.test/v1/chat/completions"
    assert s.coder.model == "deepseek-coder"
    assert s.coder.max_tokens == 2000
    assert s.retry.max_attempts == 3
    assert s.retry.base_delay_ms == 1000
    assert s.timeout == 120.0


@pytest.mark.parametrize("key", sorted(BASE_ENV))
def test_missing_required_value(key) -> None:
    env = {k: v for k, v in BASE_ENV.items() if k != key}
    with pytest.raises(ConfigError, match=key):
        load_settings(env)


def test_env_overrides() -> None:
    env = dict(BASE_ENV, RETRY_MAX_ATTEMPTS="1", RETRY_BASE_DELAY_MS="0", UPSTREAM_TIMEOUT="7.5",
               OPENAI_MODEL="gpt-4o-mini")
    s = load_settings(env)
    assert s.retry.max_attempts == 1
    assert s.retry.base_delay_ms == 0
    assert s.timeout == 7.5
    assert s.prompt_engineer.model == "gpt-4o-mini"


@pytest.mark.parametrize("env", [{"RETRY_MAX_ATTEMPTS": "0"}, {"UPSTREAM_TIMEOUT": "soon"}])
def test_invalid_values(env) -> None:
    with pytest.raises(ConfigError):
        load_settings(dict(BASE_ENV, **env))


def test_yaml_overrides(tmp_path) -> None:
    cfg = tmp_path / "codegen.yaml"
    cfg.write_text(
        "coder:\n"
        "  model: deepseek-chat\n"
        "  max_tokens: 4096\n"
        "retry:\n"
        "  max_attempts: 5\n",
        encoding="utf-8",
    )
    s = load_settings(dict(BASE_ENV, CODEGEN_CONFIG=str(cfg)))
    assert s.coder.model == "deepseek-chat"
    assert s.coder.max_tokens == 4096
    assert s.coder.temperature == 0.2
    assert s.retry.max_attempts == 5
    assert s.prompt_engineer.model == "gpt-3.5-turbo"


def test_missing_yaml_file(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_settings(dict(BASE_ENV, CODEGEN_CONFIG=str(tmp_path / "absent.yaml")))


def test_empty_openai_base_url_uses_default() -> None:
    s = load_settings(dict(BASE_ENV, OPENAI_BASE_URL=""))
    assert s.prompt_engineer.url == "https://api.openai.com/v1/chat/completions"


@pytest.mark.parametrize("key", ["OPENAI_BASE_URL", "DEEPSEEK_BASE_URL"])
def test_base_url_without_scheme(key) -> None:
    with pytest.raises(ConfigError, match=key):
        load_settings(dict(BASE_ENV, **{key: "api.deepseek.test/v1"}))
