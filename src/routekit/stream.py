"""Streaming response normalization.

Raw chunks are chat.completions stream chunks (already JSON-decoded dicts).
The normalizer yields TextDelta for each non-empty content delta, in order,
and at most one UsageSummary after the source is exhausted.

Usage extraction is per provider because each one reports cache metrics its own way:
- default: cache fields stay None unless the provider reports them
- deepseek: both cache fields are always set when usage is present (0 if missing)
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from .logging_util import get_logger
from .types import StreamEvent, TextDelta, UsageSummary

logger = get_logger(__name__)

UsageExtractor = Callable[[Dict[str, Any]], UsageSummary]

def _int_or_none(v: Any) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None

def _details(usage: Dict[str, Any]) -> Dict[str, Any]:
    details = usage.get("prompt_tokens_details")
    return details if isinstance(details, dict) else {}

def default_usage(usage: Dict[str, Any]) -> UsageSummary:
    cache_read = usage.get("cache_read_input_tokens")
    if cache_read is None:
        cache_read = _details(usage).get("cached_tokens")
    return UsageSummary(
        input_tokens=_int_or_none(usage.get("prompt_tokens")) or 0,
        output_tokens=_int_or_none(usage.get("completion_tokens")) or 0,
        cache_write_tokens=_int_or_none(usage.get("cache_creation_input_tokens")),
        cache_read_tokens=_int_or_none(cache_read),
    )

def deepseek_usage(usage: Dict[str, Any]) -> UsageSummary:
    details = _details(usage)
    cache_miss = details.get("cache_miss_tokens", usage.get("prompt_cache_miss_tokens"))
    cache_hit = details.get("cached_tokens", usage.get("prompt_cache_hit_tokens"))
    return UsageSummary(
        input_tokens=_int_or_none(usage.get("prompt_tokens")) or 0,
        output_tokens=_int_or_none(usage.get("completion_tokens")) or 0,
        cache_write_tokens=_int_or_none(cache_miss) or 0,
        cache_read_tokens=_int_or_none(cache_hit) or 0,
    )

USAGE_EXTRACTORS: Dict[str, UsageExtractor] = {
    "openai": default_usage,
    "openai-native": default_usage,
    "deepseek": deepseek_usage,
    "openrouter": default_usage,
}

def get_usage_extractor(provider: str) -> UsageExtractor:
    return USAGE_EXTRACTORS.get(provider, default_usage)

def _delta_text(chunk: Dict[str, Any]) -> str:
    choices = chunk.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    return delta.get("content") or ""

def normalize_stream(chunks: Iterable[Dict[str, Any]], extract_usage: UsageExtractor = default_usage) -> Iterator[StreamEvent]:
    """Single-consumer, forward-only. Provider errors propagate unchanged."""
    pending: Optional[UsageSummary] = None

    for chunk in chunks:
        text = _delta_text(chunk)
        if text:
            yield TextDelta(text=text)

        usage = chunk.get("usage")
        if isinstance(usage, dict):
            if pending is not None:
                logger.debug("dropping earlier usage chunk: %s", pending)
            pending = extract_usage(usage)

    if pending is not None:
        yield pending
