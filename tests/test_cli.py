import json
import sys
from pathlib import Path

import pytest

import cli
from src.routekit.adapters import ChatTransport, ProviderCallError
from src.routekit.client import RouteClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]

class ScriptedTransport(ChatTransport):
    def __init__(self, pieces, usage=None, error=None):
        self.pieces = pieces
        self.usage = usage
        self.error = error

    def stream(self, payload):
        if self.error:
            raise self.error
        for p in self.pieces:
            yield {"choices": [{"delta": {"content": p}}]}
        if self.usage is not None:
            yield {"choices": [], "usage": self.usage}

def _run_cli(monkeypatch, argv, transport, provider):
    monkeypatch.setattr(cli, "RouteClient", lambda: RouteClient(PROJECT_ROOT, transports={provider: transport}))
    monkeypatch.setattr(sys, "argv", ["cli.py", *argv])
    cli.main()

def test_streams_text_then_usage(monkeypatch, capsys):
    transport = ScriptedTransport(["Hel", "lo"], usage={"prompt_tokens": 3, "completion_tokens": 1})
    _run_cli(monkeypatch, ['{"provider":"openrouter","user_prompt":"hi"}'], transport, "openrouter")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Hello"
    assert json.loads(lines[1])["usage"]["input_tokens"] == 3

def test_missing_usage_prints_null(monkeypatch, capsys):
    _run_cli(monkeypatch, ['{"provider":"deepseek","user_prompt":"hi"}'], ScriptedTransport(["x"]), "deepseek")

    lines = capsys.readouterr().out.splitlines()
    assert json.loads(lines[1]) == {"usage": None}

def test_actions_flag_prints_parsed_result(monkeypatch, capsys):
    body = '{"actions":[{"type":"browser","operation":"navigate","target":"https://example.com"}]}'
    req = '{"provider":"deepseek","model":"deepseek-reasoner","user_prompt":"open it"}'
    _run_cli(monkeypatch, [req, "--actions"], ScriptedTransport([body]), "deepseek")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == body
    actions = json.loads(lines[2])["actions"]
    assert actions["kind"] == "success"
    assert actions["actions"][0]["operation"] == "navigate"

def test_json_flag_prints_single_result(monkeypatch, capsys):
    _run_cli(monkeypatch, ['{"provider":"openai","user_prompt":"hi"}', "--json"], ScriptedTransport(["ok"]), "openai")

    out = json.loads(capsys.readouterr().out)
    assert out["text"] == "ok"
    assert out["meta"]["request_id"] == "CLI"

def test_provider_failure_exits_1(monkeypatch):
    transport = ScriptedTransport([], error=ProviderCallError("http 503"))
    with pytest.raises(SystemExit) as exc:
        _run_cli(monkeypatch, ['{"provider":"openai","user_prompt":"hi"}'], transport, "openai")
    assert exc.value.code == 1
