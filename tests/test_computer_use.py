import json

from src.routekit import computer_use
from src.routekit.computer_use import (
    CLAUDE_COMPUTER_PROMPT,
    DEEPSEEK_COMPUTER_PROMPT,
    ComputerUseHandler,
    automation_prompt_for,
    is_deepseek_r1,
    is_deepseek_r1_free_openrouter,
    is_openrouter_computer_use_model,
    parse_action_response,
    with_computer_use,
)
from src.routekit.types import ModelCapabilities, ModelDescriptor, ParseFailure, ParseSuccess, PassThrough

ACTIONS_JSON = '{"actions":[{"type":"browser","operation":"navigate","target":"https://example.com"}]}'

class StubHandler:
    provider = "deepseek"

    def __init__(self, model_id, computer_use=True):
        self.model = ModelDescriptor(model_id, ModelCapabilities(supports_computer_use=computer_use))
        self.calls = []

    def get_model(self):
        return self.model

    def create_message(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        return iter(())

    def complete_prompt(self, prompt):
        return "done:" + prompt

def test_prepare_prompt_prepends_automation_prompt():
    h = ComputerUseHandler(StubHandler("deepseek-reasoner"))
    assert h.prepare_prompt("base") == DEEPSEEK_COMPUTER_PROMPT + "\n\nbase"

def test_prepare_prompt_unchanged_without_computer_use():
    h = ComputerUseHandler(StubHandler("deepseek-chat", computer_use=False))
    assert h.prepare_prompt("base") == "base"

def test_process_response_success():
    h = ComputerUseHandler(StubHandler("deepseek-reasoner"))
    result = h.process_response(ACTIONS_JSON)
    assert isinstance(result, ParseSuccess)
    assert result.actions == [{"type": "browser", "operation": "navigate", "target": "https://example.com"}]

def test_process_response_not_json():
    result = ComputerUseHandler(StubHandler("deepseek-reasoner")).process_response("not json")
    assert isinstance(result, ParseFailure)
    assert result.raw_text == "not json"
    assert "Failed to parse computer use actions" in result.error

def test_process_response_missing_or_non_array_actions_is_failure():
    h = ComputerUseHandler(StubHandler("deepseek-reasoner"))
    for raw in ('{"foo": 1}', '{"actions": "click"}', '{"actions": null}', "[1, 2]", '"text"'):
        result = h.process_response(raw)
        assert isinstance(result, ParseFailure), raw
        assert result.raw_text == raw

def test_empty_actions_array_is_success():
    result = ComputerUseHandler(StubHandler("deepseek-reasoner")).process_response('{"actions": []}')
    assert result == ParseSuccess(actions=[])

def test_actions_are_not_shape_checked():
    raw = json.dumps({"actions": [{"type": 1}, "odd"]})
    result = ComputerUseHandler(StubHandler("deepseek-reasoner")).process_response(raw)
    assert result.actions == [{"type": 1}, "odd"]

def test_process_response_pass_through_without_computer_use():
    h = ComputerUseHandler(StubHandler("deepseek-chat", computer_use=False))
    assert h.process_response(ACTIONS_JSON) == PassThrough(raw_text=ACTIONS_JSON)
    assert h.process_response("not json") == PassThrough(raw_text="not json")

def test_model_gate_outside_supported_set_passes_through():
    h = ComputerUseHandler(StubHandler("anthropic/claude-3.7-sonnet"), is_openrouter_computer_use_model)
    assert h.process_response(ACTIONS_JSON) == PassThrough(raw_text=ACTIONS_JSON)
    # the prompt is still augmented: only parsing is gated
    assert h.prepare_prompt("p").startswith(CLAUDE_COMPUTER_PROMPT)

def test_model_gate_inside_supported_set_parses():
    h = ComputerUseHandler(StubHandler("cognitivecomputations/dolphin3.0-r1-mistral-24b:free"),
                           is_openrouter_computer_use_model)
    assert isinstance(h.process_response(ACTIONS_JSON), ParseSuccess)
    assert isinstance(h.process_response('{"nope": true}'), ParseFailure)

def test_create_message_uses_prepared_prompt_and_other_calls_delegate():
    inner = StubHandler("deepseek-reasoner")
    h = ComputerUseHandler(inner)
    list(h.create_message("sys", [{"role": "user", "content": "hi"}]))
    assert inner.calls[0][0] == DEEPSEEK_COMPUTER_PROMPT + "\n\nsys"
    assert h.complete_prompt("x") == "done:x"
    assert h.provider == "deepseek"

def test_with_computer_use_picks_provider_gate():
    assert with_computer_use(StubHandler("deepseek-chat")).model_gate is None
    inner = StubHandler("x")
    inner.provider = "openrouter"
    assert with_computer_use(inner).model_gate is is_openrouter_computer_use_model

def test_prompt_template_selection(monkeypatch):
    monkeypatch.setattr(computer_use, "DEEPSEEK_COMPUTER_PROMPT", "deepseek-template")
    monkeypatch.setattr(computer_use, "CLAUDE_COMPUTER_PROMPT", "claude-template")
    assert automation_prompt_for("deepseek/deepseek-r1:free") == "deepseek-template"
    assert automation_prompt_for("qwen/qwen-2.5-coder-32b-instruct:free") == "deepseek-template"
    assert automation_prompt_for("cognitivecomputations/dolphin3.0-r1-mistral-24b:free") == "deepseek-template"
    assert automation_prompt_for("gpt-4o") == "deepseek-template"
    assert automation_prompt_for("anthropic/claude-3.7-sonnet") == "claude-template"

def test_model_family_predicates():
    assert is_deepseek_r1("deepseek-reasoner")
    assert is_deepseek_r1("deepseek/deepseek-r1:free")
    assert not is_deepseek_r1("deepseek-chat")
    assert is_deepseek_r1_free_openrouter("deepseek/deepseek-r1:free")
    assert not is_deepseek_r1_free_openrouter("deepseek/deepseek-r1")
    assert is_openrouter_computer_use_model("qwen/qwen-2.5-coder-32b-instruct:free")
    assert not is_openrouter_computer_use_model("meta-llama/llama-3-70b")

def test_parse_action_response_directly():
    assert isinstance(parse_action_response(ACTIONS_JSON), ParseSuccess)
    assert isinstance(parse_action_response(""), ParseFailure)

def test_deeply_nested_json_is_failure():
    raw = "[" * 100_000 + "]" * 100_000
    result = parse_action_response(raw)
    assert isinstance(result, ParseFailure)
    assert result.raw_text == raw
