"""Prompt-cache annotation shared by the request builders.

Rules:
- The system prompt becomes a single text part carrying the ephemeral marker.
- The trailing text part of the last two user messages carries the same marker.
- A user message without any text part gets a "..." placeholder to host the marker.
- Assistant messages and earlier user messages are never touched.

The marker is a cost hint for the provider. It never changes message content.
"""
from __future__ import annotations

from typing import Any, Dict, List

CACHE_USER_MESSAGES = 2
PLACEHOLDER_TEXT = "..."

def ephemeral() -> Dict[str, str]:
    return {"type": "ephemeral"}

def cached_system_message(system_prompt: str, role: str = "system") -> Dict[str, Any]:
    return {
        "role": role,
        "content": [{"type": "text", "text": system_prompt, "cache_control": ephemeral()}],
    }

def _mark_trailing_text(message: Dict[str, Any]) -> Dict[str, Any]:
    content = message.get("content")
    if isinstance(content, list):
        parts = [dict(p) for p in content]
    else:
        parts = [{"type": "text", "text": str(content or "")}]

    text_indexes = [i for i, p in enumerate(parts) if p.get("type") == "text"]
    if text_indexes:
        idx = text_indexes[-1]
    else:
        parts.append({"type": "text", "text": PLACEHOLDER_TEXT})
        idx = len(parts) - 1

    parts[idx]["cache_control"] = ephemeral()
    return {**message, "content": parts}

def annotate_user_messages(messages: List[Dict[str, Any]], count: int = CACHE_USER_MESSAGES) -> List[Dict[str, Any]]:
    user_indexes = [i for i, m in enumerate(messages) if m.get("role") == "user"]
    targets = set(user_indexes[-count:]) if count > 0 else set()

    out: List[Dict[str, Any]] = []
    for i, m in enumerate(messages):
        out.append(_mark_trailing_text(m) if i in targets else m)
    return out
