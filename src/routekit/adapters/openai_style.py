"""OpenAI-style chat.completions transport (SSE streaming and single-shot)."""
from __future__ import annotations

import json
import os
import requests
from typing import Any, Dict, Iterator, Optional

from .base import ChatTransport, ProviderCallError
from ..logging_util import get_logger

logger = get_logger(__name__)

def _sanitize_api_key(raw: str) -> str:
    k = (raw or "").strip()
    k = k.strip(' "\'`')
    k = k.strip("“”‘’")
    return k

def _parse_sse_line(line: str) -> Optional[Dict[str, Any]]:
    line = (line or "").strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if not data or data == "[DONE]":
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise ProviderCallError(f"malformed stream chunk: {data[:200]} ({e})")

class OpenAIStyleTransport(ChatTransport):
    def __init__(
        self,
        base_url: str,
        api_key_env: str,
        api_key: Optional[str] = None,
        timeout: int = 30,
        extra_headers: Optional[Dict[str, str]] = None,
    ):
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.api_key_env = api_key_env
        self.api_key = api_key
        self.timeout = timeout
        self.extra_headers = dict(extra_headers or {})

    def _headers(self) -> Dict[str, str]:
        key = _sanitize_api_key(self.api_key or os.getenv(self.api_key_env) or "")
        if not key:
            raise ProviderCallError(f"Missing environment variable: {self.api_key_env}")
        return {
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            **self.extra_headers,
        }

    def _post(self, payload: Dict[str, Any], stream: bool) -> requests.Response:
        headers = self._headers()
        try:
            r = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout, stream=stream)
        except requests.RequestException as e:
            raise ProviderCallError(f"request failed: {e}")

        if r.status_code != 200:
            body = r.text[:800]
            r.close()
            raise ProviderCallError(f"http {r.status_code}: {body}")
        return r

    def stream(self, payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        r = self._post(payload, stream=True)
        try:
            # SSE bodies are UTF-8 regardless of r.encoding.
            for line in r.iter_lines():
                if isinstance(line, bytes):
                    line = line.decode("utf-8")
                if line.strip() == "data: [DONE]":
                    break
                chunk = _parse_sse_line(line)
                if chunk is None:
                    continue
                if "error" in chunk:
                    raise ProviderCallError(f"stream error: {chunk['error']}")
                yield chunk
        except requests.RequestException as e:
            raise ProviderCallError(f"stream interrupted: {e}")
        finally:
            r.close()

    def complete(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        r = self._post(payload, stream=False)
        try:
            return r.json()
        except ValueError as e:
            raise ProviderCallError(f"invalid JSON response: {e}")
        finally:
            r.close()
