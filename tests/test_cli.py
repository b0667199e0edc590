from __future__ import annotations

import logging

import httpx
import pytest

import codegen_relay.cli.run_chain as cli_mod
from codegen_relay.serve.handler import build_handler

from conftest import chat_payload


@pytest.fixture
def env(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-deepseek")
    monkeypatch.setenv("DEEPSEEK_BASE_URL", "https://deepseek.test/v1")
    for key in ("CODEGEN_CONFIG", "OPENAI_BASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def _patch_upstream(monkeypatch, sleeper, status: int = 200) -> None:
    def upstream(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status)
        return httpx.Response(200, json=chat_payload("print('hi')"))

    def _build(settings):
        return build_handler(settings, transport=httpx.MockTransport(upstream), sleep=sleeper)

    monkeypatch.setattr(cli_mod, "build_handler", _build)


def test_cli_prints_code(env, monkeypatch, sleeper, capsys) -> None:
    _patch_upstream(monkeypatch, sleeper)
    rc = cli_mod.main(["--prompt", "say hi", "--language", "python", "--task-type", "script"])
    assert rc == 0
    assert "print('hi')" in capsys.readouterr().out


def test_cli_reports_failure(env, monkeypatch, sleeper) -> None:
    _patch_upstream(monkeypatch, sleeper, status=503)
    rc = cli_mod.main(["--prompt", "say hi", "--language", "python", "--task-type", "script"])
    assert rc == 1
    assert sleeper.delays == []


def test_cli_config_error(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    rc = cli_mod.main(["--prompt", "x", "--language", "go", "--task-type", "function"])
    assert rc == 1


def test_cli_honors_log_level(env, monkeypatch, sleeper) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    _patch_upstream(monkeypatch, sleeper)
    rc = cli_mod.main(["--prompt", "say hi", "--language", "python", "--task-type", "script"])
    assert rc == 0
    assert logging.getLogger().level == logging.WARNING
