"""Transport interface for chat.completions-style providers."""
from __future__ import annotations

from typing import Any, Dict, Iterator

class ProviderCallError(Exception):
    pass

class ChatTransport:
    def stream(self, payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        raise NotImplementedError

    def complete(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError
