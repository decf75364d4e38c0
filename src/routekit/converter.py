"""Canonical -> OpenAI chat message conversion.

Canonical messages look like:
  {"role": "user" | "assistant", "content": "text" | [part, ...]}
with parts:
  {"type": "text", "text": "..."}
  {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "..."}}
  {"type": "image", "source": {"type": "url", "url": "https://..."}}

The output is a fresh list; the caller's messages are never mutated.
"""
from __future__ import annotations

from typing import Any, Dict, List

def _image_url(source: Dict[str, Any]) -> str:
    if source.get("type") == "url":
        return str(source.get("url") or "")
    media_type = source.get("media_type") or "image/png"
    return f"data:{media_type};base64,{source.get('data') or ''}"

def _convert_part(part: Dict[str, Any]) -> Dict[str, Any]:
    kind = part.get("type")
    if kind == "image":
        return {"type": "image_url", "image_url": {"url": _image_url(part.get("source") or {})}}
    if kind == "image_url":
        return {"type": "image_url", "image_url": dict(part.get("image_url") or {})}
    return {"type": "text", "text": str(part.get("text") or "")}

def convert_to_openai_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for m in messages or []:
        role = m.get("role")
        if role not in ("user", "assistant"):
            continue
        content = m.get("content", "")
        if isinstance(content, list):
            parts = [_convert_part(p) for p in content if isinstance(p, dict)]
            if role == "assistant":
                # Assistant turns go back as plain text.
                text = "\n".join(p["text"] for p in parts if p["type"] == "text")
                out.append({"role": role, "content": text})
            else:
                out.append({"role": role, "content": parts})
        else:
            out.append({"role": role, "content": str(content or "")})
    return out

def strip_images(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop image parts from already-converted messages."""
    out: List[Dict[str, Any]] = []
    for m in messages:
        content = m.get("content")
        if isinstance(content, list):
            kept = [p for p in content if p.get("type") != "image_url"]
            out.append({**m, "content": kept})
        else:
            out.append(dict(m))
    return out
