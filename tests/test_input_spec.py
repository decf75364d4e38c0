from pathlib import Path

import pytest

from src.routekit.input_spec import DEFAULT_SYSTEM_PROMPT, parse_input

def test_parse_minimal():
    project_root = Path(__file__).resolve().parents[1]
    spec = parse_input({"provider": "deepseek", "model": "deepseek-chat", "user_prompt": "hi"}, project_root)
    assert spec.provider == "deepseek"
    assert spec.options.model_id == "deepseek-chat"
    assert spec.system_prompt == DEFAULT_SYSTEM_PROMPT
    assert spec.messages == [{"role": "user", "content": "hi"}]
    assert spec.computer_use is False

def test_unknown_provider_defaults_to_openai_native(tmp_path):
    spec = parse_input({"provider": "gemini"}, tmp_path)
    assert spec.provider == "openai-native"
    assert spec.options.model_id is None

def test_messages_sanitized_and_prompt_file_reference(tmp_path):
    (tmp_path / "sys.txt").write_text("from file", encoding="utf-8")
    spec = parse_input({
        "provider": "openrouter",
        "system_prompt": "@sys.txt",
        "messages": [
            {"role": "system", "content": "dropped"},
            {"role": "user", "content": "q1"},
            {"role": "assistant", "content": "a1"},
            "junk",
        ],
        "user_prompt": "q2",
        "computer_use": "yes",
        "options": {"temperature": "0.3", "timeout": "5"},
        "model_info": {"supportsComputerUse": True},
    }, tmp_path)
    assert spec.system_prompt == "from file"
    assert [m["content"] for m in spec.messages] == ["q1", "a1", "q2"]
    assert spec.computer_use is True
    assert spec.options.temperature == 0.3
    assert spec.options.timeout == 5
    assert spec.options.model_info == {"supportsComputerUse": True}

def test_missing_file_reference_raises(tmp_path):
    with pytest.raises(ValueError):
        parse_input({"system_prompt": "@missing.txt"}, tmp_path)
