"""RouteClient: request orchestrator."""
from __future__ import annotations

import time
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from .adapters import ChatTransport
from .badges import badge_style, computer_control_badge
from .computer_use import with_computer_use
from .handlers import build_handler
from .input_spec import parse_input
from .logging_util import get_logger, log_step
from .types import ParsedActionResponse, RouteRequest, StreamEvent, TextDelta, UsageSummary

logger = get_logger(__name__)

class RouteClient:
    def __init__(self, project_root: Optional[Path] = None, transports: Optional[Mapping[str, ChatTransport]] = None):
        # Auto-detect root:
        # <root>/src/routekit/client.py -> parents[2] == <root>
        self.project_root = project_root or Path(__file__).resolve().parents[2]
        # Injected transports (tests, custom HTTP stacks), keyed by provider tag.
        self._transports = dict(transports or {})

    def handler_for(self, spec: RouteRequest):
        handler = build_handler(
            spec.provider,
            options=spec.options,
            project_root=self.project_root,
            transport=self._transports.get(spec.provider),
        )
        if spec.computer_use:
            return with_computer_use(handler)
        return handler

    def stream(self, req: Dict[str, Any]) -> Iterator[StreamEvent]:
        spec = parse_input(req, project_root=self.project_root)
        return self.handler_for(spec).create_message(spec.system_prompt, spec.messages)

    def parse_actions(self, req: Dict[str, Any], text: str) -> ParsedActionResponse:
        spec = parse_input(req, project_root=self.project_root)
        return self.handler_for(spec).process_response(text)

    def run(self, req: Dict[str, Any], request_id: Optional[str] = None) -> Dict[str, Any]:
        meta: Dict[str, Any] = {"request_id": request_id, "steps": {}}
        t0 = time.time()

        log_step(logger, "1", "parse input")
        spec = parse_input(req, project_root=self.project_root)

        log_step(logger, "2", "select handler provider=%s computer_use=%s", spec.provider, spec.computer_use)
        handler = self.handler_for(spec)
        model = handler.get_model()
        meta["model"] = model.id
        meta["badge"] = computer_control_badge(model) if spec.computer_use else None
        meta["badge_style"] = badge_style(model.id)

        log_step(logger, "3", "stream response model=%s", model.id)
        t_call = time.time()
        parts = []
        usage: Optional[UsageSummary] = None
        try:
            for event in handler.create_message(spec.system_prompt, spec.messages):
                if isinstance(event, TextDelta):
                    parts.append(event.text)
                elif isinstance(event, UsageSummary):
                    usage = event
        except Exception as e:
            logger.exception("RouteClient.run failed: %s", e)
            raise
        meta["steps"]["call_ms"] = int((time.time() - t_call) * 1000)

        text = "".join(parts)
        actions = None
        if spec.parse_actions:
            log_step(logger, "4", "parse computer use actions")
            actions = asdict(handler.process_response(text))

        meta["steps"]["total_ms"] = int((time.time() - t0) * 1000)
        return {
            "provider": spec.provider,
            "text": text,
            # None means the provider never reported usage.
            "usage": asdict(usage) if usage is not None else None,
            "actions": actions,
            "meta": meta,
        }
