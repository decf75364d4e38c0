"""Computer-use security policy.

Design:
- Three sets: allowlisted domains, operations needing confirmation, blocked operations.
- All checks are exact membership. No wildcard or subdomain matching.
- Advisory only: whoever executes actions must consult the policy. Nothing here blocks.

security.yaml supports:
- allowlisted_domains: [...]
- confirmation_required_operations: [...]
- blocked_operations: [...]
Missing keys fall back to the built-in defaults below; an empty list means none.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable

import yaml

from .logging_util import get_logger

logger = get_logger(__name__)

DEFAULT_ALLOWLISTED_DOMAINS = (
    "github.com",
    "example.com",
    "localhost",
    "openrouter.ai",
    "deepseek.com",
    "cognitivecomputations.com",
    "qwen.ai",
)
DEFAULT_CONFIRMATION_REQUIRED = ("file_write", "file_delete", "form_submit", "clipboard_access")
DEFAULT_BLOCKED = ("password_field_interaction", "payment_field_interaction", "credential_storage")

@dataclass(frozen=True)
class SecurityPolicy:
    allowlisted_domains: FrozenSet[str]
    confirmation_required_operations: FrozenSet[str]
    blocked_operations: FrozenSet[str]

    @classmethod
    def build(
        cls,
        allowlisted_domains: Iterable[str] = DEFAULT_ALLOWLISTED_DOMAINS,
        confirmation_required_operations: Iterable[str] = DEFAULT_CONFIRMATION_REQUIRED,
        blocked_operations: Iterable[str] = DEFAULT_BLOCKED,
    ) -> "SecurityPolicy":
        return cls(
            allowlisted_domains=frozenset(allowlisted_domains),
            confirmation_required_operations=frozenset(confirmation_required_operations),
            blocked_operations=frozenset(blocked_operations),
        )

    def is_domain_allowed(self, domain: str) -> bool:
        return domain in self.allowlisted_domains

    def requires_confirmation(self, operation: str) -> bool:
        return operation in self.confirmation_required_operations

    def is_blocked(self, operation: str) -> bool:
        return operation in self.blocked_operations

def policy_path(project_root: Path) -> Path:
    return project_root / "src" / "configs" / "security.yaml"

def _entries(data: Dict[str, Any], key: str, default: Iterable[str]) -> Iterable[str]:
    # Absent key -> default. Present but empty (or null) -> empty set.
    if key not in data:
        return default
    value = data[key]
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return [str(v) for v in value]

def load_policy(path: Path) -> SecurityPolicy:
    data = {}
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except Exception as e:
            logger.error("Failed to load YAML: %s (%s)", path, e)
            data = {}

    if not isinstance(data, dict):
        logger.error("Security policy is not a mapping: %s", path)
        data = {}

    return SecurityPolicy.build(
        allowlisted_domains=_entries(data, "allowlisted_domains", DEFAULT_ALLOWLISTED_DOMAINS),
        confirmation_required_operations=_entries(data, "confirmation_required_operations", DEFAULT_CONFIRMATION_REQUIRED),
        blocked_operations=_entries(data, "blocked_operations", DEFAULT_BLOCKED),
    )

@lru_cache(maxsize=1)
def default_policy() -> SecurityPolicy:
    return load_policy(policy_path(Path(__file__).resolve().parents[2]))

def is_domain_allowed(domain: str) -> bool:
    return default_policy().is_domain_allowed(domain)

def requires_confirmation(operation: str) -> bool:
    return default_policy().requires_confirmation(operation)

def is_blocked(operation: str) -> bool:
    return default_policy().is_blocked(operation)
