"""Computer use: automation prompt injection and action parsing.

ComputerUseHandler wraps any handler. It changes two operations:
- prepare_prompt: prepends the automation prompt when the model supports computer use
- process_response: parses {"actions": [...]} out of the model's text
Everything else is delegated to the wrapped handler unchanged.

Models without supportsComputerUse are never touched: the prompt is returned
as is and responses come back as PassThrough.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterator, List, Optional

from .logging_util import get_logger
from .types import ParsedActionResponse, ParseFailure, ParseSuccess, PassThrough, StreamEvent

logger = get_logger(__name__)

CLAUDE_COMPUTER_PROMPT = """You are an automation expert. Respond with JSON commands using:
{
  "actions": [
    {"type": "browser", "operation": "navigate", "target": "https://example.com"},
    {"type": "vscode", "operation": "open_file", "target": "src/app.ts"}
  ]
}"""

# Currently identical to CLAUDE_COMPUTER_PROMPT; selected independently.
DEEPSEEK_COMPUTER_PROMPT = """You are an automation expert. Respond with JSON commands using:
{
  "actions": [
    {"type": "browser", "operation": "navigate", "target": "https://example.com"},
    {"type": "vscode", "operation": "open_file", "target": "src/app.ts"}
  ]
}"""

# ---- model families ----

def is_deepseek_r1(model_id: str) -> bool:
    return "deepseek-r1" in model_id or "deepseek/deepseek-r1" in model_id or model_id == "deepseek-reasoner"

def is_deepseek_r1_free_openrouter(model_id: str) -> bool:
    return "deepseek/deepseek-r1:free" in model_id

def is_dolphin_model(model_id: str) -> bool:
    return "cognitivecomputations/dolphin" in model_id

def is_qwen_model(model_id: str) -> bool:
    return "qwen/qwen-2.5-coder" in model_id

def is_gpt4o_model(model_id: str) -> bool:
    return "gpt-4o" in model_id

def is_openrouter_computer_use_model(model_id: str) -> bool:
    return is_deepseek_r1(model_id) or is_dolphin_model(model_id) or is_qwen_model(model_id) or is_gpt4o_model(model_id)

def _uses_deepseek_template(model_id: str) -> bool:
    return any(k in model_id for k in ("deepseek", "dolphin", "qwen", "gpt-4o"))

def automation_prompt_for(model_id: str) -> str:
    if _uses_deepseek_template(model_id):
        return DEEPSEEK_COMPUTER_PROMPT
    return CLAUDE_COMPUTER_PROMPT

# ---- response parsing ----

def parse_action_response(raw_text: str) -> ParsedActionResponse:
    """Success for a JSON object with an array `actions`, Failure for anything else."""
    try:
        data = json.loads(raw_text)
    except (TypeError, ValueError, RecursionError) as e:
        return ParseFailure(error=f"Failed to parse computer use actions: {e}", raw_text=raw_text)

    actions = data.get("actions") if isinstance(data, dict) else None
    if not isinstance(actions, list):
        return ParseFailure(
            error="Failed to parse computer use actions: response has no 'actions' array",
            raw_text=raw_text,
        )
    return ParseSuccess(actions=actions)

# Which provider wrappers gate parsing on a model family, on top of supportsComputerUse.
MODEL_GATES: Dict[str, Optional[Callable[[str], bool]]] = {
    "deepseek": None,
    "openrouter": is_openrouter_computer_use_model,
    "openai-native": is_gpt4o_model,
}

class ComputerUseHandler:
    def __init__(self, inner: Any, model_gate: Optional[Callable[[str], bool]] = None):
        self.inner = inner
        self.model_gate = model_gate

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not defined here.
        return getattr(self.inner, name)

    def prepare_prompt(self, prompt: str) -> str:
        model = self.inner.get_model()
        if model.capabilities.supports_computer_use:
            return f"{automation_prompt_for(model.id)}\n\n{prompt}"
        return prompt

    def process_response(self, raw_text: str) -> ParsedActionResponse:
        model = self.inner.get_model()
        if not model.capabilities.supports_computer_use:
            return PassThrough(raw_text=raw_text)
        if self.model_gate is not None and not self.model_gate(model.id):
            return PassThrough(raw_text=raw_text)

        result = parse_action_response(raw_text)
        if isinstance(result, ParseFailure):
            logger.warning("computer use parse failed for %s: %s", model.id, result.error)
        return result

    def create_message(self, system_prompt: str, messages: List[Dict[str, Any]]) -> Iterator[StreamEvent]:
        return self.inner.create_message(self.prepare_prompt(system_prompt), messages)

def with_computer_use(handler: Any) -> ComputerUseHandler:
    """Wrap a handler with the computer-use gate configured for its provider."""
    return ComputerUseHandler(handler, MODEL_GATES.get(getattr(handler, "provider", ""), None))
