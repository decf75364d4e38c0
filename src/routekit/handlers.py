"""Provider handlers.

A ProviderHandler is assembled from parts picked by provider tag:
  profile (endpoint, key env) + catalog + request builder + usage extractor + transport.
There is one handler class; providers differ only in the strategies plugged into it.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .adapters import ChatTransport, OpenAIStyleTransport, ProviderCallError
from .catalog import ModelCatalog, get_catalog, resolve_model
from .logging_util import get_logger
from .request_builder import OpenAICompatibleBuilder, get_builder
from .stream import UsageExtractor, get_usage_extractor, normalize_stream
from .types import HandlerOptions, ModelCapabilities, ModelDescriptor, ParsedActionResponse, PassThrough, StreamEvent

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

@dataclass(frozen=True)
class ProviderProfile:
    tag: str
    display_name: str
    api_key_env: str
    base_url_env: str
    default_base_url: str
    extra_headers: Dict[str, str] = field(default_factory=dict)

    def base_url(self, override: Optional[str] = None) -> str:
        return (override or os.environ.get(self.base_url_env) or self.default_base_url).strip()

PROFILES: Dict[str, ProviderProfile] = {
    "openai": ProviderProfile("openai", "OpenAI", "OPENAI_API_KEY", "OPENAI_BASE_URL", "https://api.openai.com/v1"),
    "openai-native": ProviderProfile(
        "openai-native", "OpenAI Native", "OPENAI_API_KEY", "OPENAI_BASE_URL", "https://api.openai.com/v1"
    ),
    "deepseek": ProviderProfile("deepseek", "DeepSeek", "DEEPSEEK_API_KEY", "DEEPSEEK_BASE_URL", "https://api.deepseek.com"),
    "openrouter": ProviderProfile(
        "openrouter",
        "OpenRouter",
        "OPENROUTER_API_KEY",
        "OPENROUTER_BASE_URL",
        "https://openrouter.ai/api/v1",
        extra_headers={"HTTP-Referer": "https://github.com/routekit/routekit", "X-Title": "routekit"},
    ),
}

def get_profile(provider: str) -> ProviderProfile:
    profile = PROFILES.get(provider)
    if profile is None:
        raise ValueError(f"unsupported provider: {provider}")
    return profile

class ProviderHandler:
    def __init__(
        self,
        profile: ProviderProfile,
        catalog: ModelCatalog,
        builder: OpenAICompatibleBuilder,
        extract_usage: UsageExtractor,
        transport: ChatTransport,
        options: Optional[HandlerOptions] = None,
    ):
        self.profile = profile
        self.catalog = catalog
        self.builder = builder
        self.extract_usage = extract_usage
        self.transport = transport
        self.options = options or HandlerOptions()

    @property
    def provider(self) -> str:
        return self.profile.tag

    def get_model(self) -> ModelDescriptor:
        if self.options.model_info is not None:
            model_id = self.options.model_id or self.catalog.default_id
            return ModelDescriptor(id=model_id, capabilities=ModelCapabilities.from_dict(self.options.model_info))
        return resolve_model(self.catalog, self.options.model_id)

    def build_request(self, system_prompt: str, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        descriptor = self.get_model()
        logger.debug("%s request for model %s", self.provider, descriptor.id)
        return self.builder.build(system_prompt, messages, descriptor, self.options)

    def create_message(self, system_prompt: str, messages: List[Dict[str, Any]]) -> Iterator[StreamEvent]:
        payload = self.build_request(system_prompt, messages)
        yield from normalize_stream(self.transport.stream(payload), self.extract_usage)

    def complete_prompt(self, prompt: str) -> str:
        payload = self.builder.build_completion(prompt, self.get_model(), self.options)
        try:
            data = self.transport.complete(payload)
        except ProviderCallError as e:
            raise ProviderCallError(f"{self.profile.display_name} completion error: {e}") from e
        choices = data.get("choices") or []
        if not choices:
            return ""
        return str((choices[0].get("message") or {}).get("content") or "")

    # Plain handlers neither augment prompts nor parse actions.
    def prepare_prompt(self, prompt: str) -> str:
        return prompt

    def process_response(self, raw_text: str) -> ParsedActionResponse:
        return PassThrough(raw_text=raw_text)

def build_handler(
    provider: str,
    options: Optional[HandlerOptions] = None,
    project_root: Optional[Path] = None,
    transport: Optional[ChatTransport] = None,
) -> ProviderHandler:
    options = options or HandlerOptions()
    profile = get_profile(provider)
    if transport is None:
        transport = OpenAIStyleTransport(
            base_url=profile.base_url(options.base_url),
            api_key_env=profile.api_key_env,
            api_key=options.api_key,
            timeout=options.timeout,
            extra_headers=profile.extra_headers,
        )
    return ProviderHandler(
        profile=profile,
        catalog=get_catalog(project_root or PROJECT_ROOT, provider),
        builder=get_builder(provider),
        extract_usage=get_usage_extractor(provider),
        transport=transport,
        options=options,
    )
