"""Simple CLI for routekit.

Usage examples:
- JSON string input (streams text to stdout, then prints usage):
  python cli.py "{\"provider\":\"deepseek\",\"model\":\"deepseek-chat\",\"user_prompt\":\"hi\"}"

- JSON file input (prefix with @):
  python cli.py @request.json

- Parse computer use actions after the text:
  python cli.py @request.json --actions

- Single JSON result instead of streaming (pretty printed):
  python cli.py @request.json --json --pretty

Notes:
- This CLI does not manage multi-turn or retries. It is strictly a single call executor.
"""
import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from src.routekit.adapters import ProviderCallError
from src.routekit.client import RouteClient
from src.routekit.logging_util import get_logger
from src.routekit.types import TextDelta, UsageSummary

logger = get_logger(__name__)

def _load_input(spec: str) -> Dict[str, Any]:
    if spec.startswith("@"):
        p = Path(spec[1:])
        data = p.read_text(encoding="utf-8")
        return json.loads(data)

    return json.loads(spec)

def _print_json(obj: Any, pretty: bool) -> None:
    if pretty:
        print(json.dumps(obj, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(obj, ensure_ascii=False))

def _stream(client: RouteClient, req: Dict[str, Any], pretty: bool) -> None:
    parts = []
    usage = None
    for event in client.stream(req):
        if isinstance(event, TextDelta):
            sys.stdout.write(event.text)
            sys.stdout.flush()
            parts.append(event.text)
        elif isinstance(event, UsageSummary):
            usage = event
    sys.stdout.write("\n")

    # null usage means the provider never reported it.
    _print_json({"usage": asdict(usage) if usage is not None else None}, pretty)

    if req.get("parse_actions"):
        result = client.parse_actions(req, "".join(parts))
        _print_json({"actions": asdict(result)}, pretty)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("input", help="JSON string or @path/to/json")
    ap.add_argument("--pretty", action="store_true", help="Pretty print the output JSON")
    ap.add_argument("--actions", action="store_true", help="Parse computer use actions from the response")
    ap.add_argument("--json", action="store_true", help="Print one JSON result instead of streaming text")
    args = ap.parse_args()

    try:
        req = _load_input(args.input)
    except Exception as e:
        logger.error("Failed to parse input: %s", e)
        sys.exit(2)

    if args.actions:
        req["computer_use"] = True
        req["parse_actions"] = True

    client = RouteClient()
    try:
        if args.json:
            _print_json(client.run(req, request_id="CLI"), args.pretty)
        else:
            _stream(client, req, args.pretty)
    except ProviderCallError as e:
        logger.error("Provider call failed: %s", e)
        sys.exit(1)

if __name__ == "__main__":
    main()
