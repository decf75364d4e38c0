"""Provider request builders.

One builder per provider tag, picked by configuration (see BUILDERS):
- openai: generic chat.completions endpoint
- openai-native: adds the reasoning-family branches (o1, o1-preview/o1-mini, o3-mini)
- deepseek: always sends max_tokens, different default temperature
- openrouter: adds OpenRouter's middle-out transform

Every streaming payload asks for usage in the terminal chunk.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .converter import convert_to_openai_messages, strip_images
from .logging_util import get_logger
from .prompt_cache import annotate_user_messages, cached_system_message
from .types import HandlerOptions, ModelDescriptor

logger = get_logger(__name__)

FORMATTING_MARKER = "Formatting re-enabled"
STREAM_OPTIONS = {"include_usage": True}

def _temperature(options: Optional[HandlerOptions], default: float) -> float:
    if options is not None and options.temperature is not None:
        return options.temperature
    return default

class OpenAICompatibleBuilder:
    """System entry, optional cache markers, converted history."""

    def __init__(
        self,
        default_temperature: float = 0.0,
        include_max_tokens: bool = False,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.default_temperature = default_temperature
        self.include_max_tokens = include_max_tokens
        self.extra = dict(extra or {})

    def messages(self, system_prompt: str, messages: List[Dict[str, Any]], descriptor: ModelDescriptor) -> List[Dict[str, Any]]:
        converted = convert_to_openai_messages(messages)
        if descriptor.capabilities.supports_prompt_cache:
            return [cached_system_message(system_prompt), *annotate_user_messages(converted)]
        return [{"role": "system", "content": system_prompt}, *converted]

    def build(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        descriptor: ModelDescriptor,
        options: Optional[HandlerOptions] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": descriptor.id,
            "temperature": _temperature(options, self.default_temperature),
            "messages": self.messages(system_prompt, messages, descriptor),
            "stream": True,
            "stream_options": dict(STREAM_OPTIONS),
        }
        if self.include_max_tokens:
            payload["max_tokens"] = descriptor.capabilities.max_tokens
        payload.update(self.extra)
        return payload

    def build_completion(self, prompt: str, descriptor: ModelDescriptor, options: Optional[HandlerOptions] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": descriptor.id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": _temperature(options, self.default_temperature),
        }
        if self.include_max_tokens:
            payload["max_tokens"] = descriptor.capabilities.max_tokens
        payload.update(self.extra)
        return payload

def reasoning_family(model_id: str) -> Optional[str]:
    """o1 | o1-legacy | o3-mini | None"""
    if model_id == "o1":
        return "o1"
    if model_id.startswith("o1"):
        return "o1-legacy"
    if model_id.startswith("o3-mini"):
        return "o3-mini"
    return None

class OpenAINativeBuilder(OpenAICompatibleBuilder):
    """Native OpenAI: reasoning models get a developer (or user) role instead of system."""

    def build(self, system_prompt, messages, descriptor, options=None):
        family = reasoning_family(descriptor.id)
        if family is None:
            return super().build(system_prompt, messages, descriptor, options)

        logger.debug("reasoning branch %s for model %s", family, descriptor.id)
        converted = convert_to_openai_messages(messages)

        if family == "o1-legacy":
            # o1-preview and o1-mini only accept user messages and no images.
            head = {"role": "user", "content": system_prompt}
            converted = strip_images(converted)
        else:
            head = {"role": "developer", "content": f"{FORMATTING_MARKER}\n{system_prompt}"}

        payload: Dict[str, Any] = {
            "model": descriptor.id,
            "messages": [head, *converted],
            "stream": True,
            "stream_options": dict(STREAM_OPTIONS),
        }
        if family == "o3-mini":
            payload["model"] = "o3-mini"
            payload["messages"] = [head, *strip_images(converted)]
            payload["reasoning_effort"] = descriptor.capabilities.reasoning_effort
        return payload

    def build_completion(self, prompt, descriptor, options=None):
        family = reasoning_family(descriptor.id)
        messages = [{"role": "user", "content": prompt}]
        if family in ("o1", "o1-legacy"):
            return {"model": descriptor.id, "messages": messages}
        if family == "o3-mini":
            return {
                "model": "o3-mini",
                "messages": messages,
                "reasoning_effort": descriptor.capabilities.reasoning_effort,
            }
        return super().build_completion(prompt, descriptor, options)

OPENAI_DEFAULT_TEMPERATURE = 0.0
DEEPSEEK_DEFAULT_TEMPERATURE = 0.6

BUILDERS: Dict[str, OpenAICompatibleBuilder] = {
    "openai": OpenAICompatibleBuilder(default_temperature=OPENAI_DEFAULT_TEMPERATURE),
    "openai-native": OpenAINativeBuilder(default_temperature=OPENAI_DEFAULT_TEMPERATURE),
    "deepseek": OpenAICompatibleBuilder(default_temperature=DEEPSEEK_DEFAULT_TEMPERATURE, include_max_tokens=True),
    "openrouter": OpenAICompatibleBuilder(
        default_temperature=OPENAI_DEFAULT_TEMPERATURE,
        extra={"transforms": ["middle-out"]},
    ),
}

def get_builder(provider: str) -> OpenAICompatibleBuilder:
    builder = BUILDERS.get(provider)
    if builder is None:
        raise ValueError(f"unsupported provider: {provider}")
    return builder
