"""Model catalog and model resolution.

Design:
- Capability tables are static data in src/configs/models.yaml, loaded once.
- Resolution never fails on an unknown model id: it falls back to the provider default.
- Only a default id missing from its own table is an error (a config bug).

models.yaml layout:
- <provider>:
    default: <model id>
    models:
      <model id>: {supportsImages: ..., supportsPromptCache: ..., ...}
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from .logging_util import get_logger
from .types import ModelCapabilities, ModelDescriptor

logger = get_logger(__name__)

class CatalogError(Exception):
    pass

def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to load YAML: %s (%s)", path, e)
        return {}

class ModelCatalog:
    """Read-only id -> descriptor table for one provider."""

    def __init__(self, provider: str, default_id: str, models: Mapping[str, ModelCapabilities]):
        self.provider = provider
        self.default_id = default_id
        self._models = MappingProxyType(dict(models))

    @classmethod
    def from_dict(cls, provider: str, data: Dict[str, Any]) -> "ModelCatalog":
        raw_models = data.get("models") or {}
        models = {str(k): ModelCapabilities.from_dict(v or {}) for k, v in raw_models.items()}
        return cls(provider, str(data.get("default") or ""), models)

    def __len__(self) -> int:
        return len(self._models)

    def lookup(self, model_id: Optional[str]) -> Optional[ModelDescriptor]:
        if not model_id or model_id not in self._models:
            return None
        return ModelDescriptor(id=model_id, capabilities=self._models[model_id])

    def default(self) -> ModelDescriptor:
        descriptor = self.lookup(self.default_id)
        if descriptor is None:
            raise CatalogError(f"default model {self.default_id!r} missing from {self.provider} catalog")
        return descriptor

def resolve_model(catalog: ModelCatalog, requested_id: Optional[str], default_id: Optional[str] = None) -> ModelDescriptor:
    found = catalog.lookup(requested_id)
    if found is not None:
        return found

    fallback_id = default_id or catalog.default_id
    if requested_id:
        logger.debug("unknown %s model %r, falling back to %r", catalog.provider, requested_id, fallback_id)

    fallback = catalog.lookup(fallback_id)
    if fallback is None:
        raise CatalogError(f"default model {fallback_id!r} missing from {catalog.provider} catalog")
    return fallback

def catalog_path(project_root: Path) -> Path:
    return project_root / "src" / "configs" / "models.yaml"

@lru_cache(maxsize=8)
def load_catalogs(project_root: Path) -> Mapping[str, ModelCatalog]:
    data = _load_yaml(catalog_path(project_root))
    catalogs = {provider: ModelCatalog.from_dict(provider, section or {}) for provider, section in data.items()}
    logger.debug("Loaded model catalogs: %s", {k: len(v) for k, v in catalogs.items()})
    return MappingProxyType(catalogs)

def get_catalog(project_root: Path, provider: str) -> ModelCatalog:
    catalogs = load_catalogs(project_root)
    catalog = catalogs.get(provider)
    if catalog is None:
        raise CatalogError(f"no model catalog for provider: {provider}")
    return catalog
