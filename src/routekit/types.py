"""Shared types and lightweight data containers.

We avoid heavy frameworks here. The goal is:
- keep descriptors and stream events immutable
- keep the parse result a small tagged union the caller must branch on
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, TypedDict, Union

ProviderTag = Literal["openai", "openai-native", "deepseek", "openrouter"]
ReasoningEffort = Literal["low", "medium", "high"]

@dataclass(frozen=True)
class ModelCapabilities:
    supports_images: bool = False
    supports_prompt_cache: bool = False
    supports_computer_use: bool = False
    max_tokens: int = 4096
    context_window: int = 128_000
    reasoning_effort: Optional[ReasoningEffort] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelCapabilities":
        # Catalog files use the camelCase keys of the upstream model tables.
        return cls(
            supports_images=bool(data.get("supportsImages", False)),
            supports_prompt_cache=bool(data.get("supportsPromptCache", False)),
            supports_computer_use=bool(data.get("supportsComputerUse", False)),
            max_tokens=int(data.get("maxTokens") or 4096),
            context_window=int(data.get("contextWindow") or 128_000),
            reasoning_effort=data.get("reasoningEffort"),
        )

@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    capabilities: ModelCapabilities

# ---- stream events ----

@dataclass(frozen=True)
class TextDelta:
    text: str
    type: Literal["text"] = "text"

@dataclass(frozen=True)
class UsageSummary:
    input_tokens: int = 0
    output_tokens: int = 0
    # None means "not reported", which is different from zero.
    cache_write_tokens: Optional[int] = None
    cache_read_tokens: Optional[int] = None
    type: Literal["usage"] = "usage"

StreamEvent = Union[TextDelta, UsageSummary]

# ---- computer use ----

class ActionCommand(TypedDict, total=False):
    type: str
    operation: str
    target: str

@dataclass(frozen=True)
class ParseSuccess:
    actions: List[ActionCommand]
    kind: Literal["success"] = "success"

@dataclass(frozen=True)
class ParseFailure:
    error: str
    raw_text: str
    kind: Literal["failure"] = "failure"

@dataclass(frozen=True)
class PassThrough:
    raw_text: str
    kind: Literal["pass_through"] = "pass_through"

ParsedActionResponse = Union[ParseSuccess, ParseFailure, PassThrough]

# ---- handler / request configuration ----

@dataclass
class HandlerOptions:
    model_id: Optional[str] = None
    # Explicit descriptor data for hosts that fetch model metadata themselves (OpenRouter).
    model_info: Optional[Dict[str, Any]] = None
    temperature: Optional[float] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: int = 30

@dataclass
class RouteRequest:
    provider: ProviderTag
    system_prompt: str
    messages: List[Dict[str, Any]]
    options: HandlerOptions = field(default_factory=HandlerOptions)
    computer_use: bool = False
    parse_actions: bool = False
