"""
Shard Search Configuration Module

Provides centralized configuration loading for the search engine.
"""

import os
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml
from pydantic import BaseModel, Field

from shard_search.domain.index.entities import IndexSection
from shard_search.domain.index.services import DEFAULT_BUCKETS, DEFAULT_MAX_RESULTS, SubstringScope


_config_cache: Optional[Dict[str, Any]] = None
CONFIG_DIR = Path(__file__).parent


def get_search_config() -> Dict[str, Any]:
    """
    Load search configuration (cached).

    Returns:
        Dict containing all search configuration settings.
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_path = CONFIG_DIR / "search_config.yaml"
    with open(config_path, 'r') as f:
        _config_cache = yaml.safe_load(f) or {}

    return _config_cache


def clear_config_cache() -> None:
    """Clear the config cache (useful for testing)."""
    global _config_cache
    _config_cache = None


class SearchSettings(BaseModel):
    """Validated search engine settings."""

    section: IndexSection = IndexSection.ALL
    buckets: List[str] = Field(default_factory=lambda: list(DEFAULT_BUCKETS))
    shard_suffix: str = ".js"
    base_url: Optional[str] = None
    local_directory: Optional[str] = None
    http_timeout: float = Field(default=10.0, gt=0)
    verify_manifest: bool = False
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1)
    substring_scope: SubstringScope = SubstringScope.HOME_SHARD

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "SearchSettings":
        """
        Build settings from the YAML config plus environment overrides.

        Environment:
            SHARD_SEARCH_BASE_URL, SHARD_SEARCH_LOCAL_DIR, SHARD_SEARCH_MAX_RESULTS
        """
        config = get_search_config() if config is None else config
        shards = config.get("shards", {}) or {}
        loader = config.get("loader", {}) or {}
        query = config.get("query", {}) or {}

        values: Dict[str, Any] = {
            "section": shards.get("section"),
            "buckets": shards.get("buckets"),
            "shard_suffix": shards.get("suffix"),
            "base_url": os.getenv("SHARD_SEARCH_BASE_URL", shards.get("base_url")),
            "local_directory": os.getenv("SHARD_SEARCH_LOCAL_DIR", shards.get("local_directory")),
            "http_timeout": loader.get("http_timeout"),
            "verify_manifest": loader.get("verify_manifest"),
            "max_results": os.getenv("SHARD_SEARCH_MAX_RESULTS", query.get("max_results")),
            "substring_scope": query.get("substring_scope"),
        }
        # Unset keys fall back to the model defaults
        return cls(**{k: v for k, v in values.items() if v is not None})
