"""Shared utilities for config loading and validation."""

from pathlib import Path
from typing import Any, Optional

import yaml

_MISSING = object()


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base. Dicts merge, lists/scalars replace."""
    merged = base.copy()
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def load_yaml(path: Path) -> Optional[dict]:
    """Load YAML file, return None if missing or empty."""
    if not path.exists():
        return None
    with open(path) as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def lookup(config: dict, dotted: str, default: Any = None) -> Any:
    """Read a nested key, e.g. lookup(cfg, "mergeRequestOptions.mainBranch")."""
    node: Any = config
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def missing_paths(config: dict, required: list[str]) -> list[str]:
    """Dotted paths from `required` that are absent, None or empty."""
    missing = []
    for path in required:
        value = lookup(config, path, _MISSING)
        if value is _MISSING or value in (None, "", [], {}):
            missing.append(path)
    return missing
